from .client import ThreeCommasClient
from .models import RemoteAccount, RemoteAccountRequest, RemoteBot, RemoteBotRequest, RemoteDeal
from .signer import RequestSigner, SignedRequest, build_string_to_sign

__all__ = [
    "ThreeCommasClient",
    "RemoteAccount",
    "RemoteAccountRequest",
    "RemoteBot",
    "RemoteBotRequest",
    "RemoteDeal",
    "RequestSigner",
    "SignedRequest",
    "build_string_to_sign",
]
