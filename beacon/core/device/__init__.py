from .fingerprint import EnvironmentSignals, generate_fingerprint
from .network import RequestMeta, resolve_client_ip
from .service import DeviceSessionBinder, TrackResult

__all__ = [
    "DeviceSessionBinder",
    "EnvironmentSignals",
    "RequestMeta",
    "TrackResult",
    "generate_fingerprint",
    "resolve_client_ip",
]
