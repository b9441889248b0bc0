"""Seed coins and per-coin parameters for the market simulator."""

# First-run coin set, mirroring what the server creates on /api/coins/init
SEED_COINS: dict[str, dict] = {
    "BTC": {
        "name": "Bitcoin",
        "price": 50000.00,
        "circulating_supply": 19_600_000,
        "volume_24h": 28_000_000_000,
        "description": "The first decentralized cryptocurrency, secured by proof of work.",
    },
    "ETH": {
        "name": "Ethereum",
        "price": 3000.00,
        "circulating_supply": 120_000_000,
        "volume_24h": 15_000_000_000,
        "description": "Programmable blockchain for smart contracts and decentralized apps.",
    },
    "SOL": {
        "name": "Solana",
        "price": 150.00,
        "circulating_supply": 440_000_000,
        "volume_24h": 3_000_000_000,
        "description": "High-throughput chain using proof of history.",
    },
    "BNB": {
        "name": "BNB",
        "price": 550.00,
        "circulating_supply": 150_000_000,
        "volume_24h": 1_500_000_000,
        "description": "Utility token of the BNB Chain ecosystem.",
    },
    "XRP": {
        "name": "XRP",
        "price": 0.55,
        "circulating_supply": 54_000_000_000,
        "volume_24h": 1_200_000_000,
        "description": "Settlement asset of the XRP Ledger.",
    },
    "ADA": {
        "name": "Cardano",
        "price": 0.45,
        "circulating_supply": 35_000_000_000,
        "volume_24h": 400_000_000,
        "description": "Proof-of-stake platform built from peer-reviewed research.",
    },
    "DOGE": {
        "name": "Dogecoin",
        "price": 0.15,
        "circulating_supply": 144_000_000_000,
        "volume_24h": 900_000_000,
        "description": "Meme coin turned payments token.",
    },
    "DOT": {
        "name": "Polkadot",
        "price": 7.00,
        "circulating_supply": 1_400_000_000,
        "volume_24h": 200_000_000,
        "description": "Relay chain connecting parachains with shared security.",
    },
}

# Per-coin GBM parameters
# sigma: annualized volatility (crypto trades 24/7, so these run high)
# mu: annualized drift / expected return
COIN_PARAMS: dict[str, dict[str, float]] = {
    "BTC": {"sigma": 0.60, "mu": 0.10},
    "ETH": {"sigma": 0.75, "mu": 0.10},
    "SOL": {"sigma": 1.00, "mu": 0.10},
    "BNB": {"sigma": 0.65, "mu": 0.08},
    "XRP": {"sigma": 0.90, "mu": 0.05},
    "ADA": {"sigma": 0.90, "mu": 0.05},
    "DOGE": {"sigma": 1.20, "mu": 0.05},  # Highest volatility
    "DOT": {"sigma": 0.95, "mu": 0.05},
}

# Default parameters for coins not in the list above
DEFAULT_PARAMS: dict[str, float] = {"sigma": 0.90, "mu": 0.05}

# Correlation groups for the simulator's Cholesky decomposition
CORRELATION_GROUPS: dict[str, set[str]] = {
    "majors": {"BTC", "ETH"},
    "alts": {"SOL", "BNB", "XRP", "ADA", "DOT"},
}

# Correlation coefficients
INTRA_MAJORS_CORR = 0.8  # BTC and ETH move together
INTRA_ALTS_CORR = 0.6
CROSS_GROUP_CORR = 0.5  # Alts follow the majors loosely
DOGE_CORR = 0.3  # DOGE does its own thing
