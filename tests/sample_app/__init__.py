"""Sample application scanned by discovery tests."""
