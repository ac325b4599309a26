from sumgen.catalog.model import Catalog, Contract, Member, Receiver, TypeEntry, Variant

__all__ = ["Catalog", "Contract", "Member", "Receiver", "TypeEntry", "Variant"]
