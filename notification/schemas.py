"""
Result types shared by channel senders and the dispatcher.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ChannelResult:
    """Outcome of one channel send."""
    success: bool
    detail: Optional[str] = None  # Message id on success, reason on failure
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, detail: Optional[str] = None, **data: Any) -> "ChannelResult":
        return cls(success=True, detail=detail, data=data)

    @classmethod
    def failed(cls, detail: str, **data: Any) -> "ChannelResult":
        return cls(success=False, detail=detail, data=data)


@dataclass
class DispatchResult:
    """
    Aggregate of one dispatch across channels.

    Channels that are not enabled for the reminder stay None.
    ``overall_success`` means the dispatch machinery ran to completion, not
    that every channel delivered; inspect the channel results for that.
    """
    email: Optional[ChannelResult] = None
    push: Optional[ChannelResult] = None
    in_app: Optional[ChannelResult] = None
    overall_success: bool = False
    error: Optional[str] = None

    def channel_results(self) -> Dict[str, ChannelResult]:
        results = {'email': self.email, 'push': self.push, 'in_app': self.in_app}
        return {name: result for name, result in results.items() if result is not None}

    def delivered_channels(self) -> list:
        return [name for name, result in self.channel_results().items() if result.success]
