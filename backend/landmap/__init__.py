"""Backend for the brownfield land map.

This package serves candidate vacant and brownfield land parcels and
railway stations around Glasgow to a browser map client, tracks which
parcel the user has selected, and scores a parcel's public-transport
accessibility from a travel-time isochrone.

- Ingests OpenStreetMap ways and nodes from the Overpass API
- Measures parcel boundaries with a spherical area formula
- Keeps a single parcel selection and notifies observers of changes
- Scores reachable isochrone area on a bounded 1-100 scale

See module sub-docstrings for details on architecture and usage.
"""
