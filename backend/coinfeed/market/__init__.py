"""Real-time market data layer for coinfeed.

Public API:
    Instrument          - Immutable coin state dataclass
    HistoryPoint        - One sample of a price/volume history series
    Timeframe           - History window enum ('1m', '3m', '5m', '10m')
    MarketSnapshotStore - Authoritative symbol -> Instrument snapshot
    ConnectionManager   - Push channel lifecycle, applies snapshots in order
    HistoryPoller       - Generation-guarded recurring history fetch
    MarketSession       - Keeps the channel in step with the credential
    CredentialProvider  - Current auth token with change notification
    create_market_backend - Factory that selects Socket.IO/HTTP or the simulator
    create_stream_router  - FastAPI router factory for list/detail/SSE endpoints
"""

from .auth import CredentialProvider
from .connection import ConnectionManager, ConnectionState
from .factory import create_market_backend
from .history import HistoryPoller, PollStatus
from .models import HistoryPoint, Instrument, Timeframe
from .session import MarketSession
from .store import MarketSnapshotStore
from .stream import create_stream_router

__all__ = [
    "Instrument",
    "HistoryPoint",
    "Timeframe",
    "MarketSnapshotStore",
    "ConnectionManager",
    "ConnectionState",
    "HistoryPoller",
    "PollStatus",
    "MarketSession",
    "CredentialProvider",
    "create_market_backend",
    "create_stream_router",
]
