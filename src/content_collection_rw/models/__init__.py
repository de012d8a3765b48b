from .collection import ContentCollection, Item, decode_collection

__all__ = ["ContentCollection", "Item", "decode_collection"]
