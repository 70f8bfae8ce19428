import numbers


def fmt_number(value):
    """ Report-safe number formatter.
    - None / NaN -> ''
    - Int -> comma separated
    - Float -> comma separated, 2 decimal places
    """
    if value is None or value != value:  # NaN compares unequal to itself
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return f"{int(value):,}"
    try:
        return f"{float(value):,.2f}"
    except (ValueError, TypeError):
        return str(value)


def fmt_datetime(value):
    """ Datetimes as 'YYYY-MM-DD HH:MM'. """
    try:
        return value.strftime("%Y-%m-%d %H:%M")
    except (AttributeError, ValueError):
        return str(value)
