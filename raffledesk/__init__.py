"""Raffle entry, draw and prize-claim management."""
