import collections.abc, keyword, logging, re

from wsdlgraph.errors import NameCollisionExhausted, SchemaTooDeep
from wsdlgraph.models import Definition, Method, ParsedWsdl, Port, PrimitiveProperty, ReferenceProperty, Service
from wsdlgraph.options import ParserOptions

logger = logging.getLogger(__name__)

class Primitives(object):
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    DATE = 'Date'
    ANY = 'any'
    STRING = 'string'

    types = {
        'int': NUMBER,
        'integer': NUMBER,
        'short': NUMBER,
        'long': NUMBER,
        'double': NUMBER,
        'float': NUMBER,
        'decimal': NUMBER,
        'bool': BOOLEAN,
        'boolean': BOOLEAN,
        'date': DATE,
        'dateTime': DATE,
        'anyType': ANY,
    }
    types = {k.lower(): v for k, v in types.items()}

    @staticmethod
    def map(token):
        if not token or not isinstance(token, str):
            return Primitives.STRING
        token = token.rsplit('|', 1)[-1].rsplit(':', 1)[-1].strip().lower()
        return Primitives.types.get(token, Primitives.STRING)

class Names(object):
    @staticmethod
    def local(name):
        if not name:
            return name
        return re.sub(r'^\{.*?\}', '', name).rsplit(':', 1)[-1]

    @staticmethod
    def words(name):
        return [w for w in re.split(r'[\W_]+', name or '') if w]

    @staticmethod
    def pascal(name):
        return ''.join(w[:1].upper() + w[1:] for w in Names.words(name))

    @staticmethod
    def camel(name):
        pascal = Names.pascal(name)
        return pascal[:1].lower() + pascal[1:]

class NameRegistry(object):
    def __init__(self, options):
        self.options = options
        self._names = {}

    def _key(self, name):
        if self.options.case_insensitive_names:
            return name.lower()
        return name

    def compose(self, base):
        return '{}{}{}'.format(self.options.name_prefix, base, self.options.name_suffix)

    @staticmethod
    def base(proposed):
        # names made only of separators keep their raw spelling
        return Names.pascal(proposed) or proposed or ''

    def final_name(self, proposed):
        return self.compose(self.base(proposed))

    def lookup(self, name):
        return self._names.get(self._key(name))

    def reserve(self, proposed):
        base = self.base(proposed)
        name = self.compose(base)
        if self.lookup(name) is None:
            return name
        retries = self.options.max_name_collision_retries
        for i in range(2, retries + 2):
            name = self.compose('{}{}'.format(base, i))
            if self.lookup(name) is None:
                logger.debug('Definition name %r is taken, using %r', self.compose(base), name)
                return name
        raise NameCollisionExhausted(base, retries)

    def register(self, definition):
        self._names[self._key(definition.name)] = definition

    def __contains__(self, name):
        return self.lookup(name) is not None

class VisitedShapes(object):
    def __init__(self):
        # id(raw node) -> (name, raw node, definition); the node is kept so its id stays unique
        self._shapes = {}

    @staticmethod
    def cacheable(raw_node):
        return raw_node is not None and not isinstance(raw_node, str)

    def recall(self, raw_node):
        if not self.cacheable(raw_node):
            return None
        entry = self._shapes.get(id(raw_node))
        if entry is None:
            return None
        return entry[2]

    def remember(self, name, raw_node, definition):
        if self.cacheable(raw_node):
            self._shapes[id(raw_node)] = (name, raw_node, definition)

    def __len__(self):
        return len(self._shapes)

class Session(object):
    def __init__(self, options=None, name='', wsdl_filename='', wsdl_path=''):
        if options is None:
            options = ParserOptions()
        elif isinstance(options, collections.abc.Mapping):
            options = ParserOptions(**options)
        self.options = options
        self.names = NameRegistry(options)
        self.shapes = VisitedShapes()
        # path of the definition being resolved, left in place when resolution fails
        self.trail = []
        self.parsed = ParsedWsdl(name=name, wsdl_filename=wsdl_filename, wsdl_path=wsdl_path)

    def add_definition(self, definition):
        self.names.register(definition)
        self.parsed.definitions.append(definition)
        return definition

class DefinitionResolver(object):
    array_marker = '[]'
    doc_keys = {
        'targetNSAlias': '@targetNSAlias `{}`',
        'targetNamespace': '@targetNamespace `{}`',
    }
    skipped_keys = ('typeName',)
    # upstream decoders sometimes leave a spurious 'undefined' key with no value
    artifact_key = 'undefined'

    def __init__(self, session):
        self.session = session

    def resolve(self, name, raw_parts, stack=()):
        # stack holds the root definition name followed by the property keys leading here
        stack = list(stack) or [name]
        self.session.trail.append(stack[-1])
        try:
            definition = self._resolve(name, raw_parts, stack)
        except NameCollisionExhausted as err:
            self.session.trail.pop()
            err.prepend(stack[-1])
            raise
        self.session.trail.pop()
        return definition

    def _resolve(self, name, raw_parts, stack):
        where = '.'.join(stack)
        logger.debug('Parsing Definition %s', where)

        definition = Definition(name=self.session.names.reserve(name), source_name=name)
        # registered before recursing so self references find it
        self.session.add_definition(definition)
        self.session.shapes.remember(definition.name, raw_parts, definition)

        if raw_parts is None:
            pass
        elif isinstance(raw_parts, str):
            source_name, _, type_token = raw_parts.rpartition('|')
            self.add(definition, PrimitiveProperty(
                name=definition.name,
                source_name=source_name or name,
                type=Primitives.map(type_token),
                description=raw_parts,
            ))
        elif isinstance(raw_parts, collections.abc.Mapping):
            for key, value in raw_parts.items():
                self.resolve_property(definition, key, value, stack)
        else:
            self.add(definition, self.opaque_property(definition.name, name, raw_parts, False, where))
        return definition

    def resolve_property(self, definition, key, value, stack):
        where = '.'.join(stack + [key])
        if key in self.doc_keys:
            definition.docs.append(self.doc_keys[key].format(value))
            return
        if key in self.skipped_keys:
            return
        if key == self.artifact_key and value is None:
            logger.error('Problem while generating definition %s: skipping malformed %r key left by the schema decoder',
                         '.'.join(stack), key)
            return

        is_array = key.endswith(self.array_marker)
        prop_name = key[:-len(self.array_marker)] if is_array else key

        if isinstance(value, str):
            prop = PrimitiveProperty(prop_name, key, Primitives.map(value), is_array, description=value)
        elif value is None:
            sub_definition = self.resolve(prop_name, None, stack + [key])
            prop = ReferenceProperty(prop_name, prop_name, sub_definition, is_array)
        elif isinstance(value, collections.abc.Mapping):
            sub_name = Names.local(value.get('typeName')) or prop_name
            sub_definition = self.session.shapes.recall(value)
            if sub_definition is None:
                sub_definition = self.resolve(sub_name, value, stack + [key])
            else:
                logger.debug('Reusing Definition %s for %s', sub_definition.name, where)
            prop = ReferenceProperty(prop_name, sub_name, sub_definition, is_array)
        else:
            prop = self.opaque_property(prop_name, key, value, is_array, where)
        self.add(definition, prop)

    def opaque_property(self, prop_name, source_name, value, is_array, where):
        type_name = getattr(value, 'name', None) or source_name
        logger.warning("Cannot parse ComplexType '%s' - using '%s' type", where, Primitives.ANY)
        return PrimitiveProperty(prop_name, source_name, Primitives.ANY, is_array,
                                 description='{} - ComplexType are not supported yet'.format(type_name))

    def rename(self, name):
        naming = self.session.options.property_naming
        if naming == 'camelCase':
            return Names.camel(name) or name
        if naming == 'PascalCase':
            return Names.pascal(name) or name
        return name

    def add(self, definition, prop):
        prop.name = self.rename(prop.name)
        return definition.add_property(prop)

class ContractWalker(object):
    # raw method key, Method attribute; resolution order decides naming on collisions
    ROLES = (
        ('input_header', 'input_header_definition'),
        ('input', 'param_definition'),
        ('output_header', 'output_header_definition'),
        ('output', 'return_definition'),
        ('fault', 'fault_definition'),
    )
    default_param_name = 'request'
    reserved_suffix = 'Param'
    reserved_words = frozenset(keyword.kwlist + ['self'])

    def __init__(self, session, raw_messages=None):
        self.session = session
        self.messages = raw_messages or {}
        self.resolver = DefinitionResolver(session)

    def walk(self, raw_services):
        parsed = self.session.parsed
        for service_name, raw_service in (raw_services or {}).items():
            logger.debug('Parsing Service %s', service_name)
            ports = []
            for port_name, raw_port in ((raw_service or {}).get('ports') or {}).items():
                logger.debug('Parsing Port %s', port_name)
                binding = (raw_port or {}).get('binding') or {}
                methods = []
                for method_name, raw_method in (binding.get('methods') or {}).items():
                    where = '{}.{}.{}'.format(service_name, port_name, method_name)
                    method = self.walk_method(where, method_name, raw_method or {})
                    methods.append(method)
                    parsed.methods.append(method)
                port = Port(Names.pascal(port_name), port_name, methods)
                ports.append(port)
                parsed.ports.append(port)
            parsed.services.append(Service(Names.pascal(service_name), service_name, ports))
        return parsed

    def walk_method(self, where, method_name, raw_method):
        logger.debug('Parsing Method %s', where)
        param_name = self.default_param_name
        raw_input = raw_method.get('input')
        if raw_input and raw_input.get('$name'):
            param_name = raw_input['$name']
        method = Method(method_name, param_name=self.param_identifier(param_name))
        for role, attribute in self.ROLES:
            setattr(method, attribute, self.resolve_role(where, role, raw_method.get(role)))
        return method

    def resolve_role(self, where, role, raw_ref):
        role_name = role.replace('_', ' ')
        if not raw_ref or not raw_ref.get('$name'):
            logger.debug("Method '%s' doesn't have any %s defined", where, role_name)
            return None
        message_name = Names.local(raw_ref['$name'])
        message = self.messages.get(message_name)
        if message is None:
            logger.warning("Method '%s' refers to unknown %s message '%s'", where, role_name, message_name)
            return None

        element = message.get('element')
        parts = message.get('parts')
        if element:
            type_name = Names.local(element.get('$type') or element.get('$name'))
            if isinstance(parts, str) and element.get('$name'):
                type_name = Names.local(element['$name'])
            type_name = type_name or message_name
        elif parts is not None:
            type_name = message_name
        else:
            logger.debug("Method '%s' doesn't have any %s parts defined", where, role_name)
            return None

        existing = self.session.names.lookup(self.session.names.final_name(type_name))
        if existing is not None:
            logger.debug('Reusing Definition %s for %s of %s', existing.name, role_name, where)
            return existing
        return self.resolver.resolve(type_name, parts, [type_name])

    def param_identifier(self, name):
        param_name = Names.camel(name) or self.default_param_name
        if param_name in self.reserved_words:
            param_name = param_name + self.reserved_suffix
        return param_name

def parse_wsdl(raw_wsdl, options=None, name='', wsdl_filename='', wsdl_path=''):
    session = Session(options, name=name, wsdl_filename=wsdl_filename, wsdl_path=wsdl_path)
    walker = ContractWalker(session, raw_wsdl.get('messages'))
    try:
        parsed = walker.walk(raw_wsdl.get('services'))
    except RecursionError as err:
        raise SchemaTooDeep(session.trail, wsdl_path or name) from err
    logger.debug('Parsed %s: %d services, %d ports, %d methods, %d definitions', name or '<wsdl>',
                 len(parsed.services), len(parsed.ports), len(parsed.methods), len(parsed.definitions))
    return parsed
