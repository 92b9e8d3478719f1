"""Static page generation — cache, site builder, template helpers."""
