from .channel import Channel
from .factory import ITransportStrategy, default_strategies, get_strategies

__all__ = ["Channel", "ITransportStrategy", "default_strategies", "get_strategies"]
