"""Frame layout for the CubeNet link layer.

On-Wire Frame Format (byte layout):
====================================
| Offset | Size         | Field   | Description                      |
|--------|--------------|---------|----------------------------------|
| 0      | 1 byte       | length  | Number of meaningful payload bytes |
| 1      | length bytes | payload | Link payload (one network packet) |
| 1+len  | F-1-len      | padding | Always 0x00, never interpreted    |
====================================

Every frame is exactly F bytes long, F being the radio payload width
(32 bytes for the nRF24L01+ radios the cubes carry).
"""

# Radio payload width
FRAME_SIZE = 32

# Length byte in front of the payload
FRAME_HEADER_SIZE = 1

# Value written into unused frame bytes
FRAME_PADDING = 0x00


def max_frame_payload(frame_size: int = FRAME_SIZE) -> int:
    """Largest payload a frame of ``frame_size`` bytes can carry."""
    return frame_size - FRAME_HEADER_SIZE
