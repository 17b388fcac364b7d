"""Treatment -> FDX conversion pipeline.

Runs the two core steps strictly in sequence (structure, then encode) and
hands the finished document to the file store.  Nothing is kept between
calls.
"""

import logging
import time
from dataclasses import dataclass

from prometheus_client import Counter, Histogram

from core.exceptions import TreatmentFDXException
from core.models import DEFAULT_AUTHOR, DEFAULT_TITLE, Screenplay, TitlePageInfo
from fdx.encoder import FDXEncoder
from services.file_store import FileStore
from services.structuring import ScreenplayStructurer, build_title_page

logger = logging.getLogger(__name__)

CONVERSIONS_TOTAL = Counter(
    "treatment_conversions_total",
    "Treatment conversions by outcome",
    ["outcome"],
)
STRUCTURING_SECONDS = Histogram(
    "treatment_structuring_seconds",
    "Time spent waiting for the text generation service",
)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one successful conversion."""

    filename: str
    title_page: TitlePageInfo
    screenplay: Screenplay


class ConversionService:
    """Convert treatments into stored FDX files."""

    def __init__(
        self,
        structurer: ScreenplayStructurer,
        file_store: FileStore,
        encoder: FDXEncoder | None = None,
        default_title: str = DEFAULT_TITLE,
        default_author: str = DEFAULT_AUTHOR,
    ) -> None:
        self.structurer = structurer
        self.file_store = file_store
        self.encoder = encoder or FDXEncoder()
        self.default_title = default_title
        self.default_author = default_author

    async def convert(
        self, treatment: str, title: str | None = None, author: str | None = None
    ) -> ConversionResult:
        """Structure, encode and store one treatment.

        Raises the first ``TreatmentFDXException`` encountered; no partial
        document is ever stored.
        """
        title_page = build_title_page(title, author, self.default_title, self.default_author)

        try:
            t0 = time.monotonic()
            screenplay = await self.structurer.structure(
                treatment, title_page.title, title_page.author
            )
            STRUCTURING_SECONDS.observe(time.monotonic() - t0)

            document = self.encoder.encode_bytes(
                screenplay, title_page.title, title_page.author
            )
            filename = self.file_store.save(document, title_page.title)
        except TreatmentFDXException as exc:
            CONVERSIONS_TOTAL.labels(outcome=exc.__class__.__name__).inc()
            raise

        CONVERSIONS_TOTAL.labels(outcome="success").inc()
        logger.info(
            "Converted treatment '%s' into %s (%d scenes)",
            title_page.title,
            filename,
            len(screenplay.scenes),
        )
        return ConversionResult(filename=filename, title_page=title_page, screenplay=screenplay)
