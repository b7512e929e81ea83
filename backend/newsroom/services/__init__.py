"""Business logic: auth guard, content lifecycle, validation rules and throttling."""
