"""API router subpackage for the land map backend.

Each module exposes its own APIRouter for composition in the application's
main FastAPI instance.

Submodules:
    - parcels: Parcel GeoJSON, search, and selection endpoints.
    - stations: Railway station GeoJSON.
    - accessibility: Isochrone analysis and scoring of a parcel.
    - data: Overpass refresh and map client configuration.

Routers read the feature store and its collaborators from ``app.state``
through small dependency functions, so tests can override them.
"""
