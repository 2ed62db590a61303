"""
Semantic type aliases for mqdepth.

These aliases make signatures self-documenting by naming what a raw
str, int, or float stands for.
"""

# Time types
type Timestamp = float
type DurationSeconds = float

# Server addressing
type ServerAddress = str  # Configured address, e.g. tcp://:secret@host:6379
type HostAddress = str
type PortNumber = int
type SocketPath = str

# Queue and database types
type QueueName = str
type DatabaseIndex = int
type QueueLength = int

# Measurement types
type MeasurementName = str
type FieldName = str
type TagName = str
type TagValue = str
