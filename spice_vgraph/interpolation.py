from typing import Sequence


def linear_interpolate(target_x: float, x_points: Sequence[float], y_points: Sequence[float]) -> float:
    """Interpolate y at target_x from samples with non-decreasing x.

    Values outside the sampled range are clamped to the first/last sample.
    An empty series gives 0.
    """
    if len(x_points) == 0:
        return 0
    if target_x <= x_points[0]:
        return y_points[0]
    if target_x >= x_points[-1]:
        return y_points[-1]

    i = 1
    while i < len(x_points) and x_points[i] < target_x:
        i += 1

    x1, y1 = x_points[i - 1], y_points[i - 1]
    x2, y2 = x_points[i], y_points[i]
    if x2 == x1:
        return y1
    return y1 + (y2 - y1) * (target_x - x1) / (x2 - x1)
