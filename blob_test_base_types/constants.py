"""
Common values used by the blob tests.
"""

from .base_types import Address, Hash

TestPrivateKey = 0x45A915E4D060149EB4365960E6A7A45F334393093061116B197E3240065FF2D8

# Destination of every blob transaction sent by the suite
BlobTxDestination = Address(0x100)

EmptyBloom = bytes([0] * 256)
EmptyOmmersRoot = Hash("0x1dcc4de8dec75d7aab85b567b6ccd41ad312451b948a7413f0a142fd40d49347")
EmptyTrieRoot = Hash("0x56e81f171bcc55a6ff8345e692c0f86e5b48e01b996cadc001622fb5e363b421")
EmptyHash = Hash(0)
ZeroAddress = Address(0x00)
