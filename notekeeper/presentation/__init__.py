"""Terminal presentation: row dispatch and rich views."""
