"""Secret Service subsystem: bus connection, typed client, and prompt handling."""

from secret_item.service.client import SecretServiceClient as SecretServiceClient
from secret_item.service.connection import open_connection as open_connection
from secret_item.service.protocol import SecretRecord as SecretRecord
from secret_item.service.protocol import SecretServiceError as SecretServiceError
