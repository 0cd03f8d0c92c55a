"""FastAPI dependency injection — wires adapters into the location service."""

from __future__ import annotations

import logging

from truckfinder.adapters.geocoder.google_maps_adapter import GoogleMapsAdapter
from truckfinder.adapters.geocoder.nominatim_adapter import NominatimAdapter
from truckfinder.adapters.truck_catalog.http_catalog import HttpTruckCatalog
from truckfinder.adapters.truck_catalog.static_catalog import StaticTruckCatalog
from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.application.ports.truck_catalog_port import TruckCatalogPort
from truckfinder.application.use_cases.location_service import LocationService
from truckfinder.config import settings

logger = logging.getLogger(__name__)

# Singleton adapters (stateless)
if settings.google_maps_api_key:
    _geocoder_adapter: GeocoderPort = GoogleMapsAdapter()
    logger.info("Using Google Maps for geocoding")
else:
    _geocoder_adapter = NominatimAdapter()

if settings.truck_data_file:
    _truck_catalog: TruckCatalogPort = StaticTruckCatalog.from_file(settings.truck_data_file)
    logger.info("Serving trucks from %s", settings.truck_data_file)
else:
    _truck_catalog = HttpTruckCatalog()

_location_service = LocationService(geocoder=_geocoder_adapter, truck_catalog=_truck_catalog)


def get_geocoder() -> GeocoderPort:
    return _geocoder_adapter


def get_truck_catalog() -> TruckCatalogPort:
    return _truck_catalog


def get_location_service() -> LocationService:
    return _location_service
