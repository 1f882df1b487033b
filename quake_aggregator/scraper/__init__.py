"""Listing and detail page scraping for PHIVOLCS."""
