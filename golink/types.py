from typing import Any, TypeAlias

from botocore.client import BaseClient


# Type aliases for Python dictionaries
LambdaEvent: TypeAlias = dict[str, Any]
LambdaContext: TypeAlias = Any
LambdaResponse: TypeAlias = dict[str, Any]
LambdaDiagnosticResponse: TypeAlias = str
LambdaConfiguration: TypeAlias = dict[str, Any]
AppConfig: TypeAlias = dict[str, Any]
HttpHeaders: TypeAlias = dict[str, str]

# Persisted JSON documents
LinkDocument: TypeAlias = dict[str, Any]
LinkStatsDocument: TypeAlias = dict[str, Any]

# Type aliases for boto3 clients
AppConfigDataClient: TypeAlias = BaseClient
