"""HTML rendering of collection listings."""

import html
from pathlib import Path

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.record import Record
from rostercache.core.entities.snapshot import Snapshot

PLACEHOLDER = "{{users}}"
DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"


class ListRenderer:
    """Fills a collection's HTML template with one table row per record.

    Templates are named ``<collection>.html`` and must contain the
    ``{{users}}`` placeholder. Each is read once and kept in memory.
    Every field is HTML-escaped before substitution.
    """

    def __init__(self, templates_dir: str | Path | None = None) -> None:
        self._templates_dir = Path(templates_dir or DEFAULT_TEMPLATES_DIR)
        self._templates: dict[Collection, str] = {}

    def template(self, collection: Collection) -> str:
        """Return the template document of a collection.

        Raises:
            FileNotFoundError: If the template file is missing.
        """
        collection = Collection(collection)
        if collection not in self._templates:
            path = self._templates_dir / f"{collection.value}.html"
            self._templates[collection] = path.read_text(encoding="utf-8")
        return self._templates[collection]

    def render(self, snapshot: Snapshot) -> str:
        """Render a snapshot into its collection's template."""
        rows = "".join(self.render_row(record) for record in snapshot)
        return self.template(snapshot.collection).replace(PLACEHOLDER, rows, 1)

    @staticmethod
    def render_row(record: Record) -> str:
        """Render one record as a ``<tr>`` block, columns in display order."""
        cells = "".join(
            f"\n          <td>{html.escape(getattr(record, name))}</td>"
            for name in record.fields
        )
        return f"\n        <tr>{cells}\n        </tr>"
