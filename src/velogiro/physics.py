G = 9.80665  # m/s²
AIR_DENSITY = 1.225  # kg/m³

MIN_SPEED_MPS = 0.5
MAX_SPEED_MPS = 60.0  # ~216 km/h
SOLVER_ITERATIONS = 40

# Floors applied to rider coefficients before solving
MIN_CRR = 0.0001
MIN_CDA = 0.05


def required_power(speed: float, gravity_force: float, rolling_force: float, drag_area: float) -> float:
    """Power at the wheel needed to hold a steady speed.

    P = v * (F_grade + F_roll) + 0.5 * rho * CdA * v^3
    """
    return speed * (gravity_force + rolling_force) + 0.5 * AIR_DENSITY * drag_area * speed**3


def solve_speed_for_power(
    wheel_power: float, gravity_force: float, rolling_force: float, drag_area: float
) -> float:
    """Find the steady-state speed (m/s) a rider holds with the given wheel power.

    Bisects [MIN_SPEED_MPS, MAX_SPEED_MPS] for a fixed number of iterations.
    Required power increases with speed once rolling resistance and drag area
    are floored, so the search narrows monotonically. Speeds that would fall
    below MIN_SPEED_MPS (steep climbs, too little power) are returned as
    MIN_SPEED_MPS so segment times stay finite.
    """
    low = MIN_SPEED_MPS
    high = MAX_SPEED_MPS

    for _ in range(SOLVER_ITERATIONS):
        mid = (low + high) / 2
        if required_power(mid, gravity_force, rolling_force, drag_area) > wheel_power:
            high = mid
        else:
            low = mid

    return max(low, MIN_SPEED_MPS)
