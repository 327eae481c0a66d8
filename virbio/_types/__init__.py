from virbio._types.base import *
from virbio._types.gpsdata import GpsPoints
from virbio._types.sensordata import SensorFrame
