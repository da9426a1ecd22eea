"""Ports - contracts between the object store and the outside world."""
