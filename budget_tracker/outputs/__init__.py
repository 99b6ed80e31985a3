from importlib import import_module


def get_output(name, config):
    """Instantiate the output class registered under ``name`` in ``output_modules``."""
    outputs = config.get('output_modules', {})
    if name not in outputs:
        raise ValueError(f"Unknown output '{name}'; choose from {', '.join(sorted(outputs))}")
    module_name, cls_name = outputs[name].rsplit('.', 1)
    return getattr(import_module(module_name), cls_name)(config)
