from golink.dao.memory.rwlock import ReadWriteLock
from golink.dao.memory.link_memory_dao import LinkMemoryDAO


__all__ = [
    'ReadWriteLock',
    'LinkMemoryDAO',
]
