"""
Core constants for the terminal watch face.
"""

# Weather API (weatherapi.com); the key ships with the app
WEATHER_API_URL = "https://api.weatherapi.com/v1/current.json"
WEATHER_API_KEY = "705b21b665264ed393603610250601"
WEATHER_LOCATION = "auto:ip"

# FTMS (Fitness Machine Service) UUID for treadmill discovery
FTMS_SERVICE_UUID = "00001826-0000-1000-8000-00805f9b34fb"

# Refresh cadence of the clock line, in seconds
CLOCK_INTERVAL = 1.0

# Placeholder values shown until each source reports
PLACEHOLDER_LOADING = "Loading..."
PLACEHOLDER_STEPS = "0 steps"
PLACEHOLDER_HEART_RATE = "0, u r dying"
BATTERY_UNAVAILABLE = "N/A"

# Terminal prompt lines around the readout
PROMPT_NOW = "user@watch:~ $ now"
PROMPT_IDLE = "user@watch:~ $"

# Application metadata
__version__ = "0.1.0"
__author__ = "OpenCode"
__description__ = "Terminal-styled status readout of time, battery, health and weather"
