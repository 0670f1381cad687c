"""Foundation layer: values, errors, configuration, tool model, registry and conversation."""
