# ABOUTME: Core metadata data structure shared by every metadata provider.
# ABOUTME: BookRecord is the interchange format between providers and the renamer.

from dataclasses import dataclass

# Full-width solidus used to join multiple contributors into one author string.
AUTHOR_SEPARATOR = "／"


def join_authors(names: list[str]) -> str:
    """Join contributor names with the full-width slash and drop ASCII spaces."""
    return AUTHOR_SEPARATOR.join(names).replace(" ", "")


@dataclass(frozen=True)
class BookRecord:
    """Bibliographic metadata resolved for a single ISBN.

    Every provider produces one of these. Fields a source does not supply are
    empty strings rather than None so templates can test them directly.
    """

    title: str
    author: str
    publisher: str = ""
    pubdate: str = ""
    isbn: str = ""

    @property
    def is_valid(self) -> bool:
        """A record is usable only when both title and author are present."""
        return bool(self.title) and bool(self.author)

    def as_context(self) -> dict[str, str]:
        """Common template fields for this record."""
        return {
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
            "pubdate": self.pubdate,
            "isbn": self.isbn,
        }
