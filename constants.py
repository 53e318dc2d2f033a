# constants.py

# =================================== BASELINE ECONOMY ==================================
LITRES_PER_100KM = 5.3  # L/100km at the optimal cruise point
IDLE_LITRES_PER_HOUR = 0.8  # realistic range: 0.5-1.0
MPG_CALIBRATION = 0.985  # calibrate mpg output to the car

# =================================== SPEED HISTORY =====================================
HISTORY_CAPACITY = 60  # raw samples kept (~1 minute at 1 Hz)
SPEED_SMOOTH_WINDOW = 10  # last N samples used for smoothing accel
URBAN_AVG_WINDOW = 12  # shorter than history so a slowdown shows quickly
STD_DEV_WINDOW = 10
STD_DEV_SENTINEL = 999.0  # returned until 2 samples exist

# =================================== GATES =============================================
MIN_MOVING_KPH = 2.0  # below this no distance is integrated
IDLE_SPEED_KPH = 3.0  # below this the idle timer burns fuel
ACCEL_CLAMP_KPH_S = 5.0

# =================================== STABILITY CLASSIFIER ==============================
STABLE_STD_KPH = 0.8
STABLE_ACCEL_KPH_S = 0.08

LIGHT_LOAD_MIN_KPH = 60.0
LIGHT_LOAD_STD_KPH = 0.6

OVERRUN_MIN_KPH = 35.0
OVERRUN_DECEL_KPH_S = -0.35
OVERRUN_STD_KPH = 0.4

COASTING_MIN_KPH = 20.0
COASTING_DECEL_KPH_S = -0.5

STEADY_CRUISE_MIN_KPH = 70.0
STEADY_CRUISE_MAX_KPH = 105.0
STEADY_CRUISE_ACCEL_KPH_S = 0.15

# =================================== MULTIPLIER MODEL ==================================
HARD_ACCEL_KPH_S = 1.5
HARD_ACCEL_MULT = 1.35
MODERATE_ACCEL_KPH_S = 0.5
MODERATE_ACCEL_MULT = 1.12

OPTIMAL_SPEED_KPH = 85.0  # ~53 mph sweet spot
SPEED_EFF_STRENGTH = 0.15  # higher = bigger penalty away from optimal

STEADY_CRUISE_MULT = 0.84  # 0.78-0.90 (lower = more efficient cruising)

COASTING_MIN_SPEED_KPH = 10.0
COASTING_REDUCTION = 0.70  # 0.6-0.85 (closer to 1 = less "free" coasting)

WARMUP_PENALTY = 0.24
WARMUP_TIME_CONST_MIN = 6.0
WARMUP_DIST_CONST_KM = 4.0

URBAN_AVG_KPH = 25.0
URBAN_CURRENT_KPH = 35.0
URBAN_MULT = 1.18

MULTIPLIER_CAP = 2.0

# Downward clamps on the effective rate (L/100km)
LIGHT_LOAD_RATE_CLAMP = 2.1
OVERRUN_RATE_CLAMP = 0.8

# =================================== DOWNHILL CREDIT ===================================
PAYBACK_FACTOR = 0.4  # fraction of baseline charged per paid-back km
PAYBACK_RATE = LITRES_PER_100KM * PAYBACK_FACTOR

# =================================== UNITS =============================================
KM_TO_MILES = 0.621371
LITRES_TO_GALLONS = 0.219969  # imperial
MPS_TO_KPH = 3.6
MPS_TO_MPH = 2.23694
SECONDS_PER_HOUR = 3600.0

# =================================== TIMING ============================================
TICK_INTERVAL_S = 1.0
NOMINAL_SAMPLE_PERIOD_S = 1.0

# =================================== COLLABORATORS =====================================
DRIVES_FILE = "drives.json"
LOGFILE = "drive_log.csv"
FUEL_PRICE_URL = "https://fuel-price-proxy.archie-moon04.workers.dev/"
FUEL_PRICE_RADIUS_KM = 10
FUEL_PRICE_TIMEOUT_S = 10.0
DEFAULT_PRICE_PENCE = 137.9  # used only when an old record has no cost

# =================================== STATS PERIODS =====================================
PERIOD_DAYS = {
    "week": 7,
    "month": 30,
    "year": 365,
}
