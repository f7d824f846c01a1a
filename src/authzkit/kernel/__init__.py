"""Kernel – error hierarchy shared by every authzkit layer."""
