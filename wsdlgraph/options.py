class ParserOptions(object):
    name_prefix = ''
    name_suffix = ''
    max_name_collision_retries = 64
    case_insensitive_names = False
    property_naming = None

    fields = ('name_prefix', 'name_suffix', 'max_name_collision_retries', 'case_insensitive_names', 'property_naming')
    property_namings = (None, 'camelCase', 'PascalCase')

    def __init__(self, **kwargs):
        self.update(kwargs)

    def update(self, kwargs):
        for k, v in kwargs.items():
            if k not in self.fields:
                continue
            if k == 'max_name_collision_retries':
                try:
                    v = int(v)
                except (TypeError, ValueError):
                    raise ValueError('max_name_collision_retries must be an integer, got {!r}'.format(v))
                if v < 0:
                    raise ValueError('max_name_collision_retries must be >= 0, got {}'.format(v))
            elif k == 'case_insensitive_names':
                v = bool(v)
            elif k in ('name_prefix', 'name_suffix'):
                v = v or ''
            elif v not in self.property_namings:
                raise ValueError('property_naming must be one of {}, got {!r}'.format(self.property_namings, v))
            setattr(self, k, v)
        return self

    def as_dict(self):
        return {k: getattr(self, k) for k in self.fields}

    def __repr__(self):
        return 'ParserOptions({})'.format(', '.join('{}={!r}'.format(k, getattr(self, k)) for k in self.fields))
