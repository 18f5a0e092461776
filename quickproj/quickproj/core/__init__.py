"""Template definitions, rendering contexts and variable expansion."""
