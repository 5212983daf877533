"""Extract, normalize and categorize transactions from UPI and bank statements."""

__version__ = "0.1.0"
