from hackathons.periods import resolve_period_id


def requested_hackathon_id(request) -> str:
    """
    Period named by ?hackathon_id= (or the body on writes); defaults to the
    current month. Raises InvalidPeriodError on a malformed id.
    """
    value = request.query_params.get("hackathon_id")
    if not value and request.method not in ("GET", "HEAD", "OPTIONS"):
        data = request.data if hasattr(request.data, "get") else {}
        value = data.get("hackathon_id")
    return resolve_period_id(value or None)
