"""Depolama fişi lokasyon yerleşim istemcisi."""
