"""Socket.IO and HTTP surface for Mafia Night."""
