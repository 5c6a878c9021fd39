# map extent around the Mid-Atlantic Bight crossing (lon_min, lon_max, lat_min, lat_max)
map_extent = (-75.5, -70.5, 36.5, 39.5)
map_centre = (-73, 38)

SHELF_BREAK_DEPTH = 200    # depth of the shelf break isobath in m
EARTH_RADIUS = 6371.0      # mean Earth radius in km

# sentinel values written when there is no data (Echoview uses -999 for empty
# cells and 999 for missing positions)
BAD_VALUES = (999, -999)

# position status codes kept from the underway log (1 = GPS fix, 2 = DGPS fix)
VALID_POSITION_STATUS = (1, 2)

RESAMPLE_STEP = 0.5   # km
BIN_WIDTH = 2         # km

SV_RANGE = (-90, -50)  # dB re 1 m-1
