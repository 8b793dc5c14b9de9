class WsdlGraphError(Exception):
    pass

class NameCollisionExhausted(WsdlGraphError):
    def __init__(self, name, retries, path=None):
        self.name = name
        self.retries = retries
        self.path = list(path or [])
        super().__init__(name, retries)

    def prepend(self, segment):
        self.path.insert(0, segment)
        return self

    def __str__(self):
        return 'No free definition name for {!r} after {} retries at {}, there is probably a cyclic definition'.format(
            self.name, self.retries, '.'.join(self.path) or '<root>')

class WsdlLoadError(WsdlGraphError):
    def __init__(self, source, reason):
        self.source = source
        self.reason = reason
        super().__init__(source, reason)

    def __str__(self):
        return 'Cannot load WSDL {}: {}'.format(self.source, self.reason)

class SchemaTooDeep(WsdlGraphError):
    def __init__(self, path=None, source=''):
        self.path = list(path or [])
        self.source = source
        super().__init__(self.path, source)

    def __str__(self):
        return 'Schema nesting is too deep to resolve{} at {}'.format(
            ' in ' + self.source if self.source else '', '.'.join(self.path) or '<root>')
