"""
Site-parser boundary for the Product Scout extraction engine.

When a retailer extractor is not resident, the coordinator may ask an
external runner to execute it elsewhere and hand back a product-shaped
payload. The runner can fail with "recipient absent" before its host is
ready; InjectThenRetryPolicy handles that with one setup-and-retry cycle.
"""
import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from product_scout.config import config
from product_scout.layers.site_detection import RetailerId
from product_scout.models.product import ParsedBy, PriceInfo, ProductRecord
from product_scout.utils.logger import LayerLogger
from product_scout.utils.text_normalizer import clean_price_text, price_info_from_text

T = TypeVar("T")

SiteParserRunner = Callable[[str], Awaitable[Dict[str, Any]]]
SetupAction = Callable[[str], Awaitable[None]]


class SiteParserError(Exception):
    """The external site parser could not produce a result."""
    pass


class RecipientAbsentError(SiteParserError):
    """The execution context that should run the parser is not ready yet."""
    pass


class RetryState(str, Enum):
    """States of the inject-then-retry policy."""
    FIRST_ATTEMPT = "first_attempt"
    RETRIED = "retried"


class InjectThenRetryPolicy:
    """
    Two-state retry policy.

    FIRST_ATTEMPT: run the operation. On RecipientAbsentError run the setup
    action once, wait `delay` seconds and move to RETRIED.
    RETRIED: run the operation again; a second RecipientAbsentError becomes a
    terminal SiteParserError. Any other error propagates unchanged.
    """

    def __init__(
        self,
        delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.delay = delay if delay is not None else config.SITE_PARSER_RETRY_DELAY
        self.sleep = sleep
        self.logger = LayerLogger("site_parser_retry")

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        setup: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> T:
        state = RetryState.FIRST_ATTEMPT
        while True:
            try:
                return await operation()
            except RecipientAbsentError as e:
                if state == RetryState.RETRIED:
                    self.logger.log_error(
                        error=str(e),
                        error_type="recipient_absent_after_retry",
                        state=state.value,
                    )
                    raise SiteParserError(f"Site parser unavailable after retry: {e}") from e

                self.logger.log_action(
                    "site_parser_retry",
                    "recipient_absent",
                    state=state.value,
                    delay=self.delay,
                    has_setup=setup is not None,
                )
                if setup is not None:
                    await setup()
                await self.sleep(self.delay)
                state = RetryState.RETRIED


class SiteParserPayload(BaseModel):
    """Product-shaped payload returned by an external site parser."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = ""
    price_info: Optional[Union[PriceInfo, str]] = Field(default=None, alias="priceInfo")
    price: Optional[Union[PriceInfo, str]] = None
    description: str = ""
    features: Union[List[str], str] = Field(default_factory=list)
    image: str = ""
    url: str = ""
    category_path: List[str] = Field(default_factory=list, alias="categoryPath")
    rating: float = 0.0
    reviews: int = 0

    @field_validator("title", "description", "image", "url", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("rating", "reviews", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return 0 if v is None else v

    def to_record(self, parsed_by: ParsedBy, site_name: str, fallback_url: str) -> ProductRecord:
        price = self.price_info if self.price_info is not None else self.price
        if isinstance(price, str):
            price = price_info_from_text(clean_price_text(price))
        elif price is None:
            price = PriceInfo.not_found()

        features = self.features
        if isinstance(features, str):
            features = [line.strip() for line in features.split("\n") if line.strip()]

        return ProductRecord(
            title=self.title.strip(),
            price=price,
            description=self.description,
            features=features,
            image=self.image,
            url=self.url or fallback_url,
            site_name=site_name,
            parsed_by=parsed_by,
            category_path=[c for c in self.category_path if c],
            rating=max(self.rating, 0.0),
            reviews=max(self.reviews, 0),
        )


class SiteParserBoundary:
    """
    Runs a non-resident retailer extractor through an external runner.

    The runner receives the retailer id and returns a product-shaped dict.
    The optional setup action prepares the runner's host (for example by
    loading the parser) and is only used after a RecipientAbsentError.
    """

    def __init__(
        self,
        runner: SiteParserRunner,
        setup: Optional[SetupAction] = None,
        policy: Optional[InjectThenRetryPolicy] = None,
    ):
        self.runner = runner
        self.setup = setup
        self.policy = policy or InjectThenRetryPolicy()
        self.logger = LayerLogger("site_parser")

    async def run(self, retailer: RetailerId, url: str = "", site_name: str = "") -> ProductRecord:
        """Run the named retailer's parser; raises SiteParserError on any failure."""
        setup = (lambda: self.setup(retailer.value)) if self.setup else None
        payload = await self.policy.run(lambda: self.runner(retailer.value), setup)

        if not isinstance(payload, dict):
            raise SiteParserError(f"Site parser returned {type(payload).__name__}, expected an object")
        try:
            parsed = SiteParserPayload.model_validate(payload)
        except ValidationError as e:
            self.logger.log_error(
                error=str(e),
                error_type="invalid_payload",
                retailer=retailer.value,
            )
            raise SiteParserError(f"Invalid site parser payload: {e.error_count()} errors") from e

        self.logger.log_action("site_parser", "completed", retailer=retailer.value)
        return parsed.to_record(ParsedBy(retailer.value), site_name or retailer.value, url)
