import collections

class OpaqueNode(object):
    # schema construct the decoder keeps but cannot decompose
    name = ''
    kind = ''

    def __init__(self, name, kind=''):
        self.name = name
        self.kind = kind

    def __repr__(self):
        return 'OpaqueNode({!r}, {!r})'.format(self.name, self.kind)

class Property(object):
    kind = ''
    name = ''
    source_name = ''
    is_array = False
    description = ''

    def as_dict(self):
        return collections.OrderedDict([
            ('kind', self.kind),
            ('name', self.name),
            ('sourceName', self.source_name),
            ('isArray', self.is_array),
            ('description', self.description),
        ])

class PrimitiveProperty(Property):
    kind = 'PRIMITIVE'
    type = 'string'

    def __init__(self, name, source_name, type, is_array=False, description=''):
        self.name = name
        self.source_name = source_name
        self.type = type
        self.is_array = is_array
        self.description = description

    def as_dict(self):
        d = super().as_dict()
        d['type'] = self.type
        return d

    def __repr__(self):
        return '{}: {}{}'.format(self.name, self.type, '[]' if self.is_array else '')

class ReferenceProperty(Property):
    kind = 'REFERENCE'
    ref = None

    def __init__(self, name, source_name, ref, is_array=False, description=''):
        self.name = name
        self.source_name = source_name
        self.ref = ref
        self.is_array = is_array
        self.description = description

    def as_dict(self):
        d = super().as_dict()
        d['ref'] = self.ref.name
        return d

    def __repr__(self):
        return '{}: -> {}{}'.format(self.name, self.ref.name, '[]' if self.is_array else '')

class Definition(object):
    name = ''
    source_name = ''
    description = ''

    def __init__(self, name, source_name, docs=None, description=''):
        self.name = name
        self.source_name = source_name
        self.docs = list(docs or [source_name])
        self.properties = []
        self.description = description

    def find_property(self, name):
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def add_property(self, prop):
        # property names stay unique within one definition
        taken = {p.name for p in self.properties}
        if prop.name in taken:
            base = prop.name
            i = 2
            while '{}{}'.format(base, i) in taken:
                i += 1
            prop.name = '{}{}'.format(base, i)
        self.properties.append(prop)
        return prop

    def as_dict(self):
        return collections.OrderedDict([
            ('name', self.name),
            ('sourceName', self.source_name),
            ('docs', list(self.docs)),
            ('description', self.description),
            ('properties', [p.as_dict() for p in self.properties]),
        ])

    def __repr__(self):
        return 'Definition({!r}, {!r})'.format(self.name, self.properties)

def _name_of(definition):
    if definition is None:
        return None
    return definition.name

class Method(object):
    name = ''
    param_name = 'request'
    param_definition = None
    return_definition = None
    input_header_definition = None
    output_header_definition = None
    fault_definition = None

    def __init__(self, name, param_name='request', param_definition=None, return_definition=None,
                 input_header_definition=None, output_header_definition=None, fault_definition=None):
        self.name = name
        self.param_name = param_name
        self.param_definition = param_definition
        self.return_definition = return_definition
        self.input_header_definition = input_header_definition
        self.output_header_definition = output_header_definition
        self.fault_definition = fault_definition

    def as_dict(self):
        return collections.OrderedDict([
            ('name', self.name),
            ('paramName', self.param_name),
            ('paramDefinition', _name_of(self.param_definition)),
            ('returnDefinition', _name_of(self.return_definition)),
            ('inputHeaderDefinition', _name_of(self.input_header_definition)),
            ('outputHeaderDefinition', _name_of(self.output_header_definition)),
            ('faultDefinition', _name_of(self.fault_definition)),
        ])

    def __repr__(self):
        return 'Method({!r}, {}={!r} -> {!r})'.format(
            self.name, self.param_name, _name_of(self.param_definition), _name_of(self.return_definition))

class Port(object):
    name = ''
    source_name = ''

    def __init__(self, name, source_name, methods=None):
        self.name = name
        self.source_name = source_name
        self.methods = list(methods or [])

    def as_dict(self):
        return collections.OrderedDict([
            ('name', self.name),
            ('sourceName', self.source_name),
            ('methods', [m.as_dict() for m in self.methods]),
        ])

    def __repr__(self):
        return 'Port({!r}, {!r})'.format(self.name, [m.name for m in self.methods])

class Service(object):
    name = ''
    source_name = ''

    def __init__(self, name, source_name, ports=None):
        self.name = name
        self.source_name = source_name
        self.ports = list(ports or [])

    def as_dict(self):
        return collections.OrderedDict([
            ('name', self.name),
            ('sourceName', self.source_name),
            ('ports', [p.as_dict() for p in self.ports]),
        ])

    def __repr__(self):
        return 'Service({!r}, {!r})'.format(self.name, [p.name for p in self.ports])

class ParsedWsdl(object):
    name = ''
    wsdl_filename = ''
    wsdl_path = ''

    def __init__(self, name='', wsdl_filename='', wsdl_path=''):
        self.name = name
        self.wsdl_filename = wsdl_filename
        self.wsdl_path = wsdl_path
        self.definitions = []
        self.ports = []
        self.services = []
        self.methods = []

    def find_definition(self, name):
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None

    def as_dict(self):
        return collections.OrderedDict([
            ('name', self.name),
            ('wsdlFilename', self.wsdl_filename),
            ('wsdlPath', self.wsdl_path),
            ('definitions', [d.as_dict() for d in self.definitions]),
            ('services', [s.as_dict() for s in self.services]),
        ])

    def __repr__(self):
        return 'ParsedWsdl({!r}, services={!r}, definitions={!r})'.format(
            self.name, [s.name for s in self.services], [d.name for d in self.definitions])
