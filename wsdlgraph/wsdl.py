import collections, hashlib, logging, os, re, tempfile

import lxml.etree, requests

from wsdlgraph.errors import SchemaTooDeep, WsdlLoadError
from wsdlgraph.models import OpaqueNode
from wsdlgraph.parser import Names, parse_wsdl

logger = logging.getLogger(__name__)

class XML(object):
    namespaces = {'wsdl': 'http://schemas.xmlsoap.org/wsdl/',
                  'soap': 'http://schemas.xmlsoap.org/wsdl/soap/',
                  'soap12': 'http://schemas.xmlsoap.org/wsdl/soap12/',
                  'http': 'http://schemas.xmlsoap.org/wsdl/http/',
                  'xs': 'http://www.w3.org/2001/XMLSchema',
                  }
    schema_namespaces = {'http://www.w3.org/2001/XMLSchema',
                         'http://www.w3.org/2000/10/XMLSchema',
                         'http://www.w3.org/1999/XMLSchema',
                         }

    @staticmethod
    def findall(xmls, xpath):
        elems = []
        for xml in xmls:
            elems.extend(xml.xpath(xpath, namespaces=XML.namespaces))
        return elems

    @staticmethod
    def find(xml, xpath):
        elems = XML.findall([xml], xpath)
        if elems:
            return elems[0]
        return None

    @staticmethod
    def stripns(text):
        text = re.sub(r'^\{.*?\}', '', text, 1)
        text = re.sub(r'^.*?:', '', text, 1)
        return text

    @staticmethod
    def qualname(tag, nsmap):
        if ':' in tag:
            prefix, name = tag.split(':', 1)
            ns = nsmap.get(prefix, prefix)
        else:
            name = tag
            ns = nsmap.get(None, '')
        return '{%s}%s' % (ns, name)

    @staticmethod
    def namespace(qualname):
        return re.match(r'^\{(.*?)\}', qualname).group(1)

    @staticmethod
    def localname(elem):
        return lxml.etree.QName(elem).localname

    @staticmethod
    def is_schema(elem, *localnames):
        if not isinstance(elem.tag, str):
            return False
        qname = lxml.etree.QName(elem)
        return qname.namespace in XML.schema_namespaces and (not localnames or qname.localname in localnames)

class WsdlReader(object):
    cache_directory = os.path.join(tempfile.gettempdir(), 'wsdls')
    timeout = 30

    def __init__(self, xml):
        self.xml = xml
        self.complex_types = {}
        self.simple_types = {}
        self.elements = {}
        self.groups = {}
        self.attribute_groups = {}
        # qualified name -> raw node, so shared and recursive types keep one identity
        self._nodes = {}
        self._index()

    @classmethod
    def get_wsdl_xml(cls, wsdl_path):
        is_url = re.match(r'^https?://', wsdl_path, re.I)
        try:
            with open(wsdl_path, 'rb') as f:
                return cls.parse_xml(f.read(), wsdl_path)
        except FileNotFoundError:
            pass
        except OSError as err:
            # urls may not even be valid file names
            if not is_url:
                raise WsdlLoadError(wsdl_path, err)
        if not is_url:
            raise WsdlLoadError(wsdl_path, 'no such file')

        cache_filename = cls.get_cache_filename(wsdl_path)
        try:
            with open(cache_filename, 'rb') as f:
                logger.debug('Using cached copy %s of %s', cache_filename, wsdl_path)
                return cls.parse_xml(f.read(), wsdl_path)
        except FileNotFoundError:
            pass
        except OSError as err:
            raise WsdlLoadError(wsdl_path, err)

        try:
            req = requests.get(wsdl_path, timeout=cls.timeout)
            req.raise_for_status()
        except requests.RequestException as err:
            raise WsdlLoadError(wsdl_path, err)
        raw_xml = req.content
        xml = cls.parse_xml(raw_xml, wsdl_path)
        try:
            with open(cache_filename, 'wb') as f:
                f.write(raw_xml)
        except OSError as err:
            logger.warning('Cannot cache %s in %s: %s', wsdl_path, cache_filename, err)
        logger.info('Downloaded %s', wsdl_path)
        return xml

    @staticmethod
    def parse_xml(raw_xml, source):
        try:
            return lxml.etree.XML(raw_xml)
        except lxml.etree.XMLSyntaxError as err:
            raise WsdlLoadError(source, err)

    @classmethod
    def get_cache_filename(cls, wsdl):
        try:
            os.makedirs(cls.cache_directory)
        except FileExistsError:
            pass
        except OSError as err:
            raise WsdlLoadError(wsdl, err)
        return os.path.join(cls.cache_directory, hashlib.sha1(wsdl.encode()).hexdigest())

    @classmethod
    def from_path(cls, wsdl_path):
        return cls(cls.get_wsdl_xml(wsdl_path))

    @classmethod
    def from_string(cls, raw_xml, source='<string>'):
        if isinstance(raw_xml, str):
            raw_xml = raw_xml.encode('utf-8')
        return cls(cls.parse_xml(raw_xml, source))

    def _index(self):
        kinds = (('complexType', self.complex_types), ('simpleType', self.simple_types), ('element', self.elements),
                 ('group', self.groups), ('attributeGroup', self.attribute_groups))
        for schema in XML.findall([self.xml], '//xs:schema'):
            tns = schema.get('targetNamespace', '')
            for localname, index in kinds:
                for elem in XML.findall([schema], 'xs:%s[@name]' % localname):
                    index['{%s}%s' % (tns, elem.get('name'))] = elem

    def read(self):
        messages = self.read_messages()
        port_types = self.read_port_types()
        bindings = self.read_bindings(port_types)
        services = self.read_services(bindings)
        return collections.OrderedDict([
            ('name', self.xml.get('name')),
            ('targetNamespace', self.xml.get('targetNamespace')),
            ('services', services),
            ('messages', messages),
        ])

    # messages, port types, bindings, services

    def read_messages(self):
        messages = collections.OrderedDict()
        for message in XML.findall([self.xml], 'wsdl:message'):
            parts = XML.findall([message], 'wsdl:part')
            raw = collections.OrderedDict([('element', None), ('parts', None)])
            if len(parts) == 1 and parts[0].get('element'):
                element_name = parts[0].get('element')
                qname = XML.qualname(element_name, parts[0].nsmap)
                elem = self.elements.get(qname)
                raw['element'] = {'$name': XML.stripns(element_name),
                                  '$type': elem.get('type') if elem is not None else None}
                if elem is None:
                    logger.warning('Message %s refers to unknown element %s', message.get('name'), element_name)
                    raw['parts'] = OpaqueNode(XML.stripns(element_name), 'unresolved element')
                else:
                    node = self.element_node(elem, qname)
                    if isinstance(node, str):
                        node = '{}|{}'.format(elem.get('name'), node)
                    raw['parts'] = node
            elif parts:
                raw['parts'] = collections.OrderedDict((part.get('name'), self.part_node(part)) for part in parts)
            messages[message.get('name')] = raw
        return messages

    def part_node(self, part):
        if part.get('element'):
            qname = XML.qualname(part.get('element'), part.nsmap)
            elem = self.elements.get(qname)
            if elem is None:
                return OpaqueNode(XML.stripns(part.get('element')), 'unresolved element')
            return self.element_node(elem, qname)
        if part.get('type'):
            return self.type_node(part.get('type'), part.nsmap)
        return 'xs:anyType'

    def read_port_types(self):
        port_types = {}
        for port_type in XML.findall([self.xml], 'wsdl:portType'):
            operations = collections.OrderedDict()
            for operation in XML.findall([port_type], 'wsdl:operation'):
                raw = collections.OrderedDict()
                for role in ('input', 'output', 'fault'):
                    elems = XML.findall([operation], 'wsdl:%s[@message]' % role)
                    if len(elems) > 1:
                        logger.debug('Operation %s declares %d %ss, using the first', operation.get('name'), len(elems), role)
                    if elems:
                        raw[role] = {'$name': XML.stripns(elems[0].get('message'))}
                operations[operation.get('name')] = raw
            port_types[port_type.get('name')] = operations
        return port_types

    def read_bindings(self, port_types):
        bindings = {}
        for binding in XML.findall([self.xml], 'wsdl:binding'):
            operations = port_types.get(XML.stripns(binding.get('type', '')))
            if operations is None:
                logger.warning('Binding %s refers to unknown port type %s', binding.get('name'), binding.get('type'))
                operations = {}
            methods = collections.OrderedDict()
            for operation in XML.findall([binding], 'wsdl:operation'):
                name = operation.get('name')
                method = collections.OrderedDict(operations.get(name, {}))
                for role in ('input', 'output'):
                    headers = XML.findall([operation], 'wsdl:%s/soap:header[@message]|wsdl:%s/soap12:header[@message]'
                                          % (role, role))
                    if headers:
                        method['%s_header' % role] = {'$name': XML.stripns(headers[0].get('message'))}
                methods[name] = method
            bindings[binding.get('name')] = {'methods': methods}
        return bindings

    def read_services(self, bindings):
        services = collections.OrderedDict()
        for service in XML.findall([self.xml], 'wsdl:service'):
            ports = collections.OrderedDict()
            for port in XML.findall([service], 'wsdl:port'):
                binding = bindings.get(XML.stripns(port.get('binding', '')))
                if binding is None:
                    logger.warning('Port %s refers to unknown binding %s', port.get('name'), port.get('binding'))
                    binding = {'methods': collections.OrderedDict()}
                address = XML.find(port, 'soap:address|soap12:address|http:address')
                ports[port.get('name')] = {
                    'location': address.get('location') if address is not None else None,
                    'binding': binding,
                }
            services[service.get('name')] = {'ports': ports}
        return services

    # schema types

    def new_node(self, elem, type_name=None):
        node = collections.OrderedDict()
        schema = XML.find(elem, 'ancestor::xs:schema[1]')
        tns = schema.get('targetNamespace') if schema is not None else None
        if tns:
            aliases = [k for k, v in elem.nsmap.items() if v == tns and k]
            if aliases:
                node['targetNSAlias'] = aliases[0]
            node['targetNamespace'] = tns
        if type_name:
            node['typeName'] = type_name
        return node

    def type_node(self, type_attr, nsmap):
        qname = XML.qualname(type_attr, nsmap)
        if XML.namespace(qname) in XML.schema_namespaces:
            return type_attr
        if qname in self.complex_types:
            return self.complex_node(self.complex_types[qname], qname, XML.stripns(type_attr))
        if qname in self.simple_types:
            return self.simple_token(self.simple_types[qname])
        logger.warning('Unknown schema type %s', type_attr)
        return OpaqueNode(XML.stripns(type_attr), 'unresolved type')

    def simple_token(self, elem, seen=None):
        seen = seen or set()
        restriction = XML.find(elem, 'xs:restriction[@base]')
        if restriction is None:
            # list and union
            return 'xs:string'
        base = restriction.get('base')
        qname = XML.qualname(base, restriction.nsmap)
        if qname in self.simple_types and qname not in seen:
            seen.add(qname)
            return self.simple_token(self.simple_types[qname], seen)
        return base

    def element_node(self, elem, key=None):
        if elem.get('type'):
            return self.type_node(elem.get('type'), elem.nsmap)
        complex_type = XML.find(elem, 'xs:complexType')
        if complex_type is not None:
            return self.complex_node(complex_type, key and 'element ' + key)
        simple_type = XML.find(elem, 'xs:simpleType')
        if simple_type is not None:
            return self.simple_token(simple_type)
        return 'xs:anyType'

    def complex_node(self, elem, key=None, type_name=None):
        if key is not None and key in self._nodes:
            return self._nodes[key]

        content = XML.find(elem, 'xs:complexContent|xs:simpleContent')
        extension = XML.find(elem, 'xs:complexContent/xs:extension[@base]')
        if content is not None and extension is None:
            node = OpaqueNode(type_name or elem.get('name') or XML.localname(content), XML.localname(content))
            if key is not None:
                self._nodes[key] = node
            return node

        node = self.new_node(elem, type_name)
        if key is not None:
            self._nodes[key] = node
        if extension is not None:
            self.fill_base(node, extension, {key})
            self.fill(node, extension)
        else:
            self.fill(node, elem)
        return node

    def fill_base(self, node, extension, seen):
        base = extension.get('base')
        qname = XML.qualname(base, extension.nsmap)
        base_type = self.complex_types.get(qname)
        if base_type is None or qname in seen:
            logger.warning('Cannot extend %s - using an opaque base', base)
            node[XML.stripns(base)] = OpaqueNode(XML.stripns(base), 'extension base')
            return
        seen.add(qname)
        base_extension = XML.find(base_type, 'xs:complexContent/xs:extension[@base]')
        if base_extension is not None:
            self.fill_base(node, base_extension, seen)
            self.fill(node, base_extension)
        else:
            self.fill(node, base_type)

    def fill(self, node, elem):
        for child in elem:
            if not XML.is_schema(child):
                continue
            localname = XML.localname(child)
            if localname in ('sequence', 'choice', 'all'):
                self.fill(node, child)
            elif localname == 'element':
                self.add_element(node, child)
            elif localname == 'attribute':
                self.add_attribute(node, child)
            elif localname in ('group', 'attributeGroup') and child.get('ref'):
                index = self.groups if localname == 'group' else self.attribute_groups
                group = index.get(XML.qualname(child.get('ref'), child.nsmap))
                if group is None:
                    logger.warning('Unknown %s %s', localname, child.get('ref'))
                else:
                    self.fill(node, group)
            elif localname in ('any', 'anyAttribute', 'annotation'):
                continue
            else:
                logger.debug('Skipping schema construct %s', localname)

    @staticmethod
    def is_array(elem):
        max_occurs = elem.get('maxOccurs', '1')
        if max_occurs == 'unbounded':
            return True
        try:
            return int(max_occurs) > 1
        except ValueError:
            return False

    def add_element(self, node, elem):
        if elem.get('ref'):
            qname = XML.qualname(elem.get('ref'), elem.nsmap)
            name = XML.stripns(elem.get('ref'))
            target = self.elements.get(qname)
            if target is None:
                logger.warning('Unknown element reference %s', elem.get('ref'))
                value = OpaqueNode(name, 'unresolved element')
            else:
                value = self.element_node(target, qname)
        else:
            name = elem.get('name')
            value = self.element_node(elem)
        if not name:
            return
        node[name + '[]' if self.is_array(elem) else name] = value

    def add_attribute(self, node, elem):
        name = elem.get('name') or XML.stripns(elem.get('ref', ''))
        if not name:
            return
        if elem.get('type'):
            value = self.type_node(elem.get('type'), elem.nsmap)
        else:
            simple_type = XML.find(elem, 'xs:simpleType')
            value = self.simple_token(simple_type) if simple_type is not None else 'xs:string'
        node[name] = value

def load_wsdl(wsdl_path, options=None):
    reader = WsdlReader.from_path(wsdl_path)
    filename = os.path.basename(re.sub(r'\?.*$', '', wsdl_path))
    if not re.match(r'^https?://', wsdl_path, re.I):
        wsdl_path = os.path.abspath(wsdl_path)
    try:
        raw_wsdl = reader.read()
    except RecursionError as err:
        raise SchemaTooDeep(source=wsdl_path) from err
    return parse_wsdl(raw_wsdl, options,
                      name=Names.pascal(os.path.splitext(filename)[0]),
                      wsdl_filename=filename,
                      wsdl_path=wsdl_path)
