import hashlib

from ..models import DateOnly, Event

UID_DOMAIN = "dancelist"


class Fingerprinter:
    """Generates stable identifiers for events.

    Events carry no ID of their own, so calendar entries are identified by a
    hash of the fields which say which event it is (as opposed to details
    which may be corrected later, like the price or bands).
    """

    @staticmethod
    def _normalize(text: str) -> str:
        return text.strip().lower()

    @staticmethod
    def generate_fingerprint(event: Event) -> str:
        """Generates a SHA256 fingerprint for a single event.

        Args:
            event: The event to fingerprint.

        Returns:
            Hex digest of the normalised name, city, country and start.
        """
        if isinstance(event.time, DateOnly):
            start = event.time.start_date.isoformat()
        else:
            start = event.time.start.isoformat()

        raw = "|".join(
            [
                Fingerprinter._normalize(event.name),
                Fingerprinter._normalize(event.city),
                Fingerprinter._normalize(event.country),
                start,
            ]
        )
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    @staticmethod
    def calendar_uid(event: Event) -> str:
        """Returns an iCalendar UID for the event."""
        return f"{Fingerprinter.generate_fingerprint(event)[:32]}@{UID_DOMAIN}"
