# ABOUTME: isbnrename renames scanned-book folders from the ISBN barcode on their cover.
# ABOUTME: Exposes the package version used in the HTTP User-Agent and CLI.

__version__ = "0.1.0"
