import logging
import re

from bs4 import BeautifulSoup

from domain.exceptions.aggregation import AdapterError
from domain.models.asset import AggregatedDataset, Asset, AssetType, Rate, RateType
from infrastructure.adapters.parsing import to_float
from infrastructure.utils.time import now_ms

logger = logging.getLogger(__name__)

QUOTE_CURRENCY = 'DZD'

# Currency codes quoted on the page and the names used there
CURRENCY_NAMES = {
    'EUR': 'Euro',
    'USD': 'Dollar US',
    'CAD': 'Dollar Canadien',
    'GBP': 'Livre Sterling',
    'CHF': 'Franc Suisse',
    'TRY': 'Livre Turque',
    'CNY': 'Yuan Chinois',
    'SAR': 'Rial Saoudien',
    'AED': 'Dirham Emirati',
    'TND': 'Dinar Tunisien',
    'MAD': 'Dirham Marocain',
}

PRICE_PATTERN = re.compile(r'\d+(?:\.\d+)?')


class ForexAlgerieAdapter:
    """Scrapes square (parallel) market quotes for the dinar out of the page HTML."""

    def __init__(self, source_name: str):
        self.source_name = source_name

    def adapt(self, raw_html: str) -> AggregatedDataset:
        if not isinstance(raw_html, str):
            raise AdapterError(f'{self.source_name} expected an HTML document')

        logger.info(f'Adapting data from {self.source_name}')
        soup = BeautifulSoup(raw_html, 'html.parser')
        adapted = AggregatedDataset()
        now = now_ms()

        for code, display_name in CURRENCY_NAMES.items():
            lower_code = code.lower()
            buying = self._extract_price(soup, f'{lower_code}Buy')
            selling = self._extract_price(soup, f'{lower_code}Sell')
            if buying is None or selling is None:
                continue

            identifier = f'{code}_{QUOTE_CURRENCY}'
            adapted.assets[identifier] = Asset(
                identifier=identifier,
                name=f'{display_name} to {QUOTE_CURRENCY}',
                type=AssetType.CURRENCY,
                source=self.source_name,
                timestamp=now,
                rates={
                    RateType.PARALLEL_MARKET: Rate(
                        buying=buying,
                        selling=selling,
                        mid_rate=(buying + selling) / 2,
                        unit=QUOTE_CURRENCY,
                    )
                },
            )

        logger.info(f'Adapted {len(adapted)} assets.')
        return adapted

    def _extract_price(self, soup: BeautifulSoup, element_id: str) -> float | None:
        element = soup.find(id=element_id)
        if element is not None:
            match = PRICE_PATTERN.search(element.get_text(strip=True))
            if match:
                return to_float(match.group(0))
        logger.warning(f'Could not extract price for ID: {element_id}')
        return None
