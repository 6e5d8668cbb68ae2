"""
Typed result records produced by the scraper.

Every record is a dataclass; `to_dict()` turns it into the JSON-ready
dictionary callers serialize.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Union

# Numeric label fields fall back to "" when the page does not expose them
LabelNumber = Union[int, str]


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Author:
    name: str
    id: str
    avatar: str


@dataclass
class ReplyImage:
    src: str
    alt: str = ''


@dataclass
class Reply:
    """One reply row of a topic page."""
    id: str
    floor: LabelNumber
    author: Author
    content: str
    content_html: str
    images: List[ReplyImage]
    time: str
    device: str
    solana_addresses: List[str]
    solana_domains: List[str]

    def has_content(self) -> bool:
        return bool(self.content) or bool(self.images)


@dataclass
class RecentReply:
    """A reply listed on a member's profile page."""
    time: str
    content: str
    topic_id: str
    topic_url: str
    solana_addresses: List[str]
    solana_domains: List[str]


@dataclass
class SocialLink:
    url: str
    label: str


@dataclass
class PageLink:
    page: int
    url: str


@dataclass
class Pagination:
    has_multiple_pages: bool = False
    total_pages: int = 1
    current_page: int = 1
    page_urls: List[PageLink] = field(default_factory=list)


@dataclass
class PostStatistics:
    reply_count: int
    total_floors: int
    total_pages: Optional[int] = None
    failed_pages: List[int] = field(default_factory=list)

    @classmethod
    def from_replies(cls, replies: List[Reply], total_pages: Optional[int] = None,
                     failed_pages: Optional[List[int]] = None) -> 'PostStatistics':
        """Derive counts from a reply list; the opening post is floor zero."""
        return cls(
            reply_count=len(replies),
            total_floors=len(replies) + 1,
            total_pages=total_pages,
            failed_pages=list(failed_pages or []),
        )


@dataclass
class PostResult:
    """A topic page: opening post, its replies and derived statistics."""
    type: ClassVar[str] = 'post'

    url: str
    post_id: str
    title: str
    author: Author
    post_time: str
    click_count: LabelNumber
    content: str
    tags: List[str]
    reply_user_ids: List[str]
    replies: List[Reply]
    statistics: PostStatistics
    solana_addresses: List[str]
    solana_domains: List[str]
    parsed_at: str = field(default_factory=utc_timestamp)
    pagination: Optional[Pagination] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type}
        data.update(asdict(self))
        if self.pagination is None:
            data.pop('pagination')
        return data


@dataclass
class ProfileResult:
    """A member profile page."""
    type: ClassVar[str] = 'user_info'

    url: str
    username: str
    user_id: str
    member_id: LabelNumber
    avatar: str
    signature: str
    join_time: str
    active_rank: LabelNumber
    is_pro: bool
    social_links: Dict[str, SocialLink]
    solana_address: Optional[str]
    solana_domain: Optional[str]
    recent_replies: List[RecentReply]
    parsed_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type}
        data.update(asdict(self))
        return data


PageResult = Union[PostResult, ProfileResult]


@dataclass
class BatchOutcome:
    """Per-target result of a batch run."""
    target: str
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    retry_attempts: int = 0
    timestamp: str = field(default_factory=utc_timestamp)

    @classmethod
    def succeeded(cls, target: str, result: PageResult, retry_attempts: int) -> 'BatchOutcome':
        return cls(target=target, success=True, data=result.to_dict(), retry_attempts=retry_attempts)

    @classmethod
    def failed(cls, target: str, error: Exception, retry_attempts: int) -> 'BatchOutcome':
        return cls(target=target, success=False, error=str(error), retry_attempts=retry_attempts)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Progress events: exactly five kinds, each tagged by `status`

@dataclass
class ProgressEvent:
    current_index: int
    total: int
    target: Optional[str]
    message: str

    status: ClassVar[str] = ''


@dataclass
class ProgressStart(ProgressEvent):
    status: ClassVar[str] = 'start'


@dataclass
class ProgressSuccess(ProgressEvent):
    result: Optional[PageResult] = None

    status: ClassVar[str] = 'success'


@dataclass
class ProgressRetry(ProgressEvent):
    attempt: int = 0
    error: str = ''

    status: ClassVar[str] = 'retry'


@dataclass
class ProgressError(ProgressEvent):
    error: str = ''
    retry_attempts: int = 0

    status: ClassVar[str] = 'error'


@dataclass
class ProgressComplete(ProgressEvent):
    success_count: int = 0
    failure_count: int = 0
    success_rate: float = 0.0

    status: ClassVar[str] = 'complete'
