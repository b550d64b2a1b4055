from datetime import datetime, timezone

from authlink.domain.interfaces.services import IClock


class SystemClock(IClock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
