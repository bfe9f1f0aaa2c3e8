from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Optional

from golink.types import LinkStatsDocument


_COUNTERS = ('referring_sites', 'browsers', 'operating_systems', 'countries', 'clicks_by_date', 'device_types')


@dataclass
class LinkStatsModel:
    """Aggregated click statistics of a single link.

    Counters are keyed by the dimension value (e.g. referrer host or country code);
    `clicks_by_date` is keyed by UTC date in YYYY-MM-DD format.

    Example:
        >>> stats = LinkStatsModel(short='docs')
        >>> stats.record_click(referrer='news.ycombinator.com', country='BG')
        >>> stats.total_clicks, stats.countries
        (1, {'BG': 1})
    """

    short: str
    status: str = 'active'
    total_clicks: int = 0
    unique_clicks: int = 0
    referring_sites: dict[str, int] = field(default_factory=dict)
    browsers: dict[str, int] = field(default_factory=dict)
    operating_systems: dict[str, int] = field(default_factory=dict)
    countries: dict[str, int] = field(default_factory=dict)
    clicks_by_date: dict[str, int] = field(default_factory=dict)
    device_types: dict[str, int] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_clicked_at: Optional[datetime] = None

    def record_click(
        self,
        *,
        referrer: str = '',
        browser: str = '',
        operating_system: str = '',
        country: str = '',
        device_type: str = '',
        now: Optional[datetime] = None,
    ) -> None:
        """Account for one click. Empty dimensions are not counted."""
        now = now or datetime.now(UTC)

        self.total_clicks += 1
        # Visitors are not fingerprinted, every click counts as unique
        self.unique_clicks += 1

        for counter, value in (
            (self.referring_sites, referrer),
            (self.browsers, browser),
            (self.operating_systems, operating_system),
            (self.countries, country),
            (self.device_types, device_type),
        ):
            if value:
                counter[value] = counter.get(value, 0) + 1

        today = now.strftime('%Y-%m-%d')
        self.clicks_by_date[today] = self.clicks_by_date.get(today, 0) + 1
        self.last_clicked_at = now

    def to_document(self) -> LinkStatsDocument:
        document = {
            'short': self.short,
            'status': self.status,
            'total_clicks': self.total_clicks,
            'unique_clicks': self.unique_clicks,
            'created_at': None if self.created_at is None else self.created_at.isoformat(),
            'last_clicked_at': None if self.last_clicked_at is None else self.last_clicked_at.isoformat(),
        }
        for name in _COUNTERS:
            document[name] = dict(getattr(self, name))
        return document

    @classmethod
    def from_document(cls, document: LinkStatsDocument) -> 'LinkStatsModel':
        created_at = document.get('created_at')
        last_clicked_at = document.get('last_clicked_at')
        return cls(
            short=document['short'],
            status=document.get('status', 'active'),
            total_clicks=int(document.get('total_clicks', 0)),
            unique_clicks=int(document.get('unique_clicks', 0)),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            last_clicked_at=datetime.fromisoformat(last_clicked_at) if last_clicked_at else None,
            **{name: {k: int(v) for k, v in (document.get(name) or {}).items()} for name in _COUNTERS},
        )
