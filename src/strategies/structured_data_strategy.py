# src/strategies/structured_data_strategy.py

"""Retail-site strategy reading schema.org Product structured data."""

import json
import urllib.parse
from typing import Any

from bs4 import BeautifulSoup, Tag

from src.models.errors import StrategyFailure
from src.models.product import ProductRecord
from src.strategies.http_strategy import HttpStrategy

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "CAD": "CA$",
    "EUR": "€",
    "GBP": "£",
}


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _iter_jsonld(soup: BeautifulSoup) -> list[dict[str, Any]]:
    """Return every JSON-LD object on the page, flattening ``@graph``."""
    found: list[dict[str, Any]] = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or script.get_text() or "")
        except json.JSONDecodeError:
            continue
        for item in _as_list(data):
            if not isinstance(item, dict):
                continue
            found.append(item)
            found.extend(
                g for g in _as_list(item.get("@graph"))
                if isinstance(g, dict)
            )
    return found


def _is_product(node: dict[str, Any]) -> bool:
    return "Product" in _as_list(node.get("@type"))


def format_price(amount: Any, currency: str | None) -> str:
    """Render an offer amount as a currency-prefixed display string."""
    try:
        value = float(str(amount).replace(",", ""))
    except ValueError:
        return ""
    code = (currency or "USD").upper()
    symbol = _CURRENCY_SYMBOLS.get(code, f"{code} ")
    return f"{symbol}{value:,.2f}"


def format_availability(value: str) -> str:
    """Turn ``https://schema.org/InStock`` into ``In Stock``."""
    tail = value.rstrip("/").rsplit("/", 1)[-1]
    words: list[str] = []
    for ch in tail:
        if ch.isupper() and words:
            words.append(" ")
        words.append(ch)
    return "".join(words).strip()


def format_rating(rating: dict[str, Any]) -> str:
    """Render an ``aggregateRating`` as ``x.y/5``, or ``""`` if unusable.

    Values on another scale are rescaled by ``bestRating``; a missing,
    zero or negative ``bestRating`` means the usual five-point scale.
    """
    try:
        value = float(str(rating.get("ratingValue", "")).strip())
        best = float(str(rating.get("bestRating") or 5).strip())
    except ValueError:
        return ""
    if best <= 0:
        best = 5.0
    count = rating.get("reviewCount") or rating.get("ratingCount")
    suffix = f" ({count} reviews)" if count else ""
    return f"{value * 5 / best:.1f}/5{suffix}"


class StructuredDataStrategy(HttpStrategy):
    """Fetch the first search hit on a retail site and read its JSON-LD.

    The site (search URL template, product link selector) comes from
    ``Settings.STRUCTURED_DATA_SITES`` keyed by the strategy name.
    OpenGraph ``<meta>`` tags fill in whatever the JSON-LD lacks.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        try:
            self.site: dict[str, str] = (
                self.settings.STRUCTURED_DATA_SITES[name]
            )
        except KeyError as exc:
            raise ValueError(
                f"No structured-data site configured for '{name}'"
            ) from exc

    def _get_homepage(self) -> str:
        """Return the configured site homepage."""
        return self.site["homepage"]

    def _search_url(self, product_name: str) -> str:
        return self.site["search_url"].format(
            query=urllib.parse.quote_plus(product_name)
        )

    def _first_product_url(self, soup: BeautifulSoup) -> str | None:
        """Return the absolute URL of the first product link."""
        link = soup.select_one(self.site["product_link"])
        if not isinstance(link, Tag):
            return None
        href = link.get("href")
        if not isinstance(href, str) or not href:
            return None
        return urllib.parse.urljoin(self._get_homepage(), href)

    @staticmethod
    def _meta(soup: BeautifulSoup, prop: str) -> str:
        tag = soup.find("meta", attrs={"property": prop}) or soup.find(
            "meta", attrs={"name": prop}
        )
        if isinstance(tag, Tag):
            content = tag.get("content")
            if isinstance(content, str):
                return content.strip()
        return ""

    def parse_product_page(
        self, soup: BeautifulSoup, product_name: str,
    ) -> ProductRecord:
        """Build a record from a product page's structured data."""
        record = self._new_record(product_name)
        product = next(
            (n for n in _iter_jsonld(soup) if _is_product(n)), None
        )

        if product is not None:
            offers = _as_list(product.get("offers"))
            offer: dict[str, Any] = next(
                (o for o in offers if isinstance(o, dict)), {}
            )
            amount = offer.get("price", offer.get("lowPrice"))
            if amount is not None:
                record.price = format_price(
                    amount, offer.get("priceCurrency")
                )
            if offer.get("availability"):
                record.availability = format_availability(
                    str(offer["availability"])
                )

            rating = product.get("aggregateRating")
            if isinstance(rating, dict):
                record.rating = format_rating(rating)

            record.description = str(product.get("description", ""))
            for image in _as_list(product.get("image")):
                url = image.get("url") if isinstance(image, dict) else image
                if isinstance(url, str) and url:
                    record.images.append(url)

            brand = product.get("brand")
            if isinstance(brand, dict):
                brand = brand.get("name")
            if brand:
                record.specifications["Brand"] = str(brand)
            for key, label in (
                ("sku", "SKU"),
                ("gtin13", "GTIN"),
                ("model", "Model"),
                ("color", "Color"),
            ):
                if product.get(key):
                    record.specifications[label] = str(product[key])
            for prop in _as_list(product.get("additionalProperty")):
                if isinstance(prop, dict) and prop.get("name"):
                    record.specifications[str(prop["name"])] = str(
                        prop.get("value", "")
                    )
                    record.features.append(
                        f"{prop['name']}: {prop.get('value', '')}"
                    )

        if not record.description:
            record.description = self._meta(soup, "og:description")
        if not record.images:
            og_image = self._meta(soup, "og:image")
            if og_image:
                record.images.append(og_image)
        if not record.price:
            amount = self._meta(soup, "product:price:amount")
            if amount:
                record.price = format_price(
                    amount, self._meta(soup, "product:price:currency")
                )

        record.specifications["Retailer"] = self.site["homepage"]
        return record

    def fetch(self, product_name: str) -> ProductRecord:
        """Search the site and read the first hit's product page."""
        search_soup = self._get_page(self._search_url(product_name))
        if search_soup is None:
            raise StrategyFailure(
                f"{self.name} search page unavailable"
            )

        # Some sites inline the product data on the search page itself
        if any(_is_product(n) for n in _iter_jsonld(search_soup)):
            page = search_soup
        else:
            product_url = self._first_product_url(search_soup)
            if product_url is None:
                raise StrategyFailure(
                    f"No {self.name} search results for '{product_name}'"
                )
            self.logger.info(
                "[%s] Following first result: %s",
                self.name,
                product_url,
            )
            page = self._get_page(product_url)
            if page is None:
                raise StrategyFailure(
                    f"{self.name} product page unavailable"
                )

        record = self.parse_product_page(page, product_name)
        if not (record.price or record.rating or record.images):
            raise StrategyFailure(
                f"{self.name} page had no product data"
            )
        return record
