"""calfs - a calendar projected onto a read-only year/month/day filesystem."""
