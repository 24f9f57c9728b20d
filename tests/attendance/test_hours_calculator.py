from datetime import datetime

from workhub.attendance.calculator.standard_calculator import StandardHoursCalculator


def test_worked_hours_rounded_to_two_decimals():
    calc = StandardHoursCalculator()
    hours = calc.worked_hours(datetime(2025, 1, 1, 9, 0), datetime(2025, 1, 1, 17, 20))

    assert hours == 8.33


def test_overtime_only_beyond_standard_day():
    calc = StandardHoursCalculator(standard_hours=8)

    assert calc.overtime_hours(9.5) == 1.5
    assert calc.overtime_hours(7.0) == 0.0
