"""Packet construction, transmission and reachability polling."""
