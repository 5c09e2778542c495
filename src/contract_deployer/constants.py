"""Configuration constants for contract-deployer library."""

# Network profiles based on the SKALE testnet chain registry
# Credentials are secret references, resolved at deploy time
NETWORK_CONFIG = {
    "skale-nebula-testnet": {
        "chain_id": 37084624,
        "rpc_url": "https://testnet.skalenodes.com/v1/lanky-ill-funny-testnet",
        "credential": "env:PRIVATE_KEY",
    },
}

# Explorer-compatible verification APIs keyed by chain id
# Custom chains are not known to any public explorer registry
VERIFIER_CONFIG = {
    37084624: {
        "kind": "explorer-api",
        "network": "skale-nebula-testnet",
        "endpoints": {
            "submit": "https://internal.explorer.testnet.skalenodes.com:10031/api",
            "browse": "https://internal.explorer.testnet.skalenodes.com",
        },
        # Blockscout accepts any non-empty key
        "api_key": "empty",
    },
}

SOURCIFY_CONFIG = {
    "enabled": True,
    "chain_ids": [37084624],
    "server_url": "https://sourcify.dev/server",
    "repository_url": "https://repo.sourcify.dev",
}

DEPLOYMENT_CONFIG = {
    "confirmations": 1,
    "timeout": 120,  # seconds
    "poll_interval": 2,  # seconds
}

# Default deployment unit of this project
DEFAULT_CONTRACT = "GameScores"

# Constructor argument replaced by the signing account address
DEPLOYER_VARIABLE = "$deployer"

# Secret reference prefix for environment variables
ENV_PREFIX = "env:"

# Timeout for verification HTTP requests, in seconds
VERIFY_REQUEST_TIMEOUT = 30
