from golink.utils import initialize_logging


initialize_logging()
