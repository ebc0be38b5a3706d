"""Press (context) settings schema."""

from pydantic import BaseModel


class PressContext(BaseModel):
    """Settings of the press depositing metadata.

    Passed explicitly into the builder, client and orchestrator instead of
    being looked up by press id at call time.

    Attributes:
        id: Press identifier (used in archive file names)
        publisher_name: Publisher display name keyed by locale
        depositor_name: Name written into the document head
        depositor_email: Email written into the document head
        username: Deposit account user name
        password: Deposit account password
        test_mode: Deposit to the test endpoint instead of production
        base_url: Public site URL used to build resource links
    """

    id: str
    publisher_name: dict[str, str] = {}
    depositor_name: str | None = None
    depositor_email: str | None = None
    username: str | None = None
    password: str | None = None
    test_mode: bool = False
    base_url: str = ""

    def localized_publisher_name(self, locale: str) -> str | None:
        """Return the publisher name for a locale, or None if unset."""
        return self.publisher_name.get(locale) or None

    @property
    def credentials(self) -> tuple[str, str]:
        """The (username, password) pair for the deposit endpoint."""
        return (self.username or "", self.password or "")
