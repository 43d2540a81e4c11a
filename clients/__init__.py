# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    get_database_url,
    get_valkey_url,
    reset_vault_cache,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
