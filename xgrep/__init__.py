"""Building blocks for searching xlsx, xlsm, csv and tsv files."""

__version__ = "0.3.2"

__all__ = ["benchgen", "hidden", "oracle", "sst", "walker", "xml_scan", "zip_index"]