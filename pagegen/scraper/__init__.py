"""Scraper package — rendered page capture & markup reduction."""

from pagegen.scraper.loader import load_page
from pagegen.scraper.models import DEVICE_SEPARATOR, CapturedMarkup
from pagegen.scraper.reducer import reduce_markup

__all__ = ["load_page", "reduce_markup", "CapturedMarkup", "DEVICE_SEPARATOR"]
