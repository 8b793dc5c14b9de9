"""Shared fixtures for wsdlgraph tests."""

import sys

import pytest

CALC_WSDL = """<?xml version="1.0" encoding="UTF-8"?>
<wsdl:definitions name="CalcService"
    targetNamespace="http://example.com/calc"
    xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/"
    xmlns:soap="http://schemas.xmlsoap.org/wsdl/soap/"
    xmlns:xs="http://www.w3.org/2001/XMLSchema"
    xmlns:tns="http://example.com/calc">
  <wsdl:types>
    <xs:schema targetNamespace="http://example.com/calc" elementFormDefault="qualified">
      <xs:complexType name="Address">
        <xs:sequence>
          <xs:element name="street" type="xs:string"/>
          <xs:element name="city" type="xs:string"/>
        </xs:sequence>
      </xs:complexType>
      <xs:complexType name="Person">
        <xs:sequence>
          <xs:element name="name" type="xs:string"/>
          <xs:element name="home" type="tns:Address"/>
          <xs:element name="work" type="tns:Address" minOccurs="0"/>
          <xs:element name="friends" type="tns:Person" minOccurs="0" maxOccurs="unbounded"/>
          <xs:element name="tags" type="xs:string" minOccurs="0" maxOccurs="unbounded"/>
          <xs:element name="level" type="tns:Level"/>
        </xs:sequence>
        <xs:attribute name="id" type="xs:long"/>
      </xs:complexType>
      <xs:simpleType name="Level">
        <xs:restriction base="xs:int">
          <xs:minInclusive value="0"/>
        </xs:restriction>
      </xs:simpleType>
      <xs:complexType name="Restricted">
        <xs:complexContent>
          <xs:restriction base="tns:Address">
            <xs:sequence>
              <xs:element name="street" type="xs:string"/>
            </xs:sequence>
          </xs:restriction>
        </xs:complexContent>
      </xs:complexType>
      <xs:complexType name="Manager">
        <xs:complexContent>
          <xs:extension base="tns:Person">
            <xs:sequence>
              <xs:element name="reports" type="xs:int"/>
              <xs:element name="odd" type="tns:Restricted"/>
            </xs:sequence>
          </xs:extension>
        </xs:complexContent>
      </xs:complexType>
      <xs:element name="GetPersonRequest">
        <xs:complexType>
          <xs:sequence>
            <xs:element name="id" type="xs:int"/>
          </xs:sequence>
        </xs:complexType>
      </xs:element>
      <xs:element name="GetPersonResponse" type="tns:Person"/>
      <xs:element name="GetManagerResponse" type="tns:Manager"/>
      <xs:element name="Echo" type="xs:string"/>
      <xs:element name="AuthHeader">
        <xs:complexType>
          <xs:sequence>
            <xs:element name="token" type="xs:string"/>
          </xs:sequence>
        </xs:complexType>
      </xs:element>
    </xs:schema>
  </wsdl:types>
  <wsdl:message name="GetPersonIn">
    <wsdl:part name="parameters" element="tns:GetPersonRequest"/>
  </wsdl:message>
  <wsdl:message name="GetPersonOut">
    <wsdl:part name="parameters" element="tns:GetPersonResponse"/>
  </wsdl:message>
  <wsdl:message name="GetManagerOut">
    <wsdl:part name="parameters" element="tns:GetManagerResponse"/>
  </wsdl:message>
  <wsdl:message name="AuthIn">
    <wsdl:part name="header" element="tns:AuthHeader"/>
  </wsdl:message>
  <wsdl:message name="EchoIn">
    <wsdl:part name="parameters" element="tns:Echo"/>
  </wsdl:message>
  <wsdl:message name="EchoOut">
    <wsdl:part name="parameters" element="tns:Echo"/>
  </wsdl:message>
  <wsdl:message name="AddIn">
    <wsdl:part name="a" type="xs:int"/>
    <wsdl:part name="b" type="xs:int"/>
  </wsdl:message>
  <wsdl:message name="AddOut">
    <wsdl:part name="sum" type="xs:int"/>
  </wsdl:message>
  <wsdl:portType name="CalcPortType">
    <wsdl:operation name="GetPerson">
      <wsdl:input message="tns:GetPersonIn"/>
      <wsdl:output message="tns:GetPersonOut"/>
    </wsdl:operation>
    <wsdl:operation name="GetManager">
      <wsdl:input message="tns:GetPersonIn"/>
      <wsdl:output message="tns:GetManagerOut"/>
    </wsdl:operation>
    <wsdl:operation name="Echo">
      <wsdl:input message="tns:EchoIn"/>
      <wsdl:output message="tns:EchoOut"/>
    </wsdl:operation>
    <wsdl:operation name="Add">
      <wsdl:input message="tns:AddIn"/>
      <wsdl:output message="tns:AddOut"/>
    </wsdl:operation>
  </wsdl:portType>
  <wsdl:binding name="CalcBinding" type="tns:CalcPortType">
    <soap:binding style="document" transport="http://schemas.xmlsoap.org/soap/http"/>
    <wsdl:operation name="GetPerson">
      <soap:operation soapAction="urn:GetPerson"/>
      <wsdl:input>
        <soap:header message="tns:AuthIn" part="header" use="literal"/>
        <soap:body use="literal"/>
      </wsdl:input>
      <wsdl:output>
        <soap:body use="literal"/>
      </wsdl:output>
    </wsdl:operation>
    <wsdl:operation name="GetManager">
      <soap:operation soapAction="urn:GetManager"/>
      <wsdl:input><soap:body use="literal"/></wsdl:input>
      <wsdl:output><soap:body use="literal"/></wsdl:output>
    </wsdl:operation>
    <wsdl:operation name="Echo">
      <soap:operation soapAction="urn:Echo"/>
      <wsdl:input><soap:body use="literal"/></wsdl:input>
      <wsdl:output><soap:body use="literal"/></wsdl:output>
    </wsdl:operation>
    <wsdl:operation name="Add">
      <soap:operation soapAction="urn:Add"/>
      <wsdl:input><soap:body use="literal"/></wsdl:input>
      <wsdl:output><soap:body use="literal"/></wsdl:output>
    </wsdl:operation>
  </wsdl:binding>
  <wsdl:service name="CalcService">
    <wsdl:port name="CalcPort" binding="tns:CalcBinding">
      <soap:address location="http://example.com/calc"/>
    </wsdl:port>
  </wsdl:service>
</wsdl:definitions>
"""

@pytest.fixture
def calc_wsdl():
    return CALC_WSDL

@pytest.fixture
def calc_wsdl_path(tmp_path):
    path = tmp_path / 'calc_service.wsdl'
    path.write_text(CALC_WSDL, encoding='utf-8')
    return path


def deep_wsdl(depth):
    """A valid document whose request type chains ``depth`` named types."""
    types = ''.join(
        '<xs:complexType name="T{0}"><xs:sequence>'
        '<xs:element name="next" type="tns:T{1}"/>'
        '</xs:sequence></xs:complexType>'.format(i, i + 1)
        for i in range(depth))
    types += ('<xs:complexType name="T{}"><xs:sequence>'
              '<xs:element name="leaf" type="xs:string"/>'
              '</xs:sequence></xs:complexType>'.format(depth))
    return """<?xml version="1.0" encoding="UTF-8"?>
<wsdl:definitions name="DeepService"
    targetNamespace="http://example.com/deep"
    xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/"
    xmlns:soap="http://schemas.xmlsoap.org/wsdl/soap/"
    xmlns:xs="http://www.w3.org/2001/XMLSchema"
    xmlns:tns="http://example.com/deep">
  <wsdl:types>
    <xs:schema targetNamespace="http://example.com/deep">{}</xs:schema>
  </wsdl:types>
  <wsdl:message name="DigIn">
    <wsdl:part name="root" type="tns:T0"/>
  </wsdl:message>
  <wsdl:portType name="DeepPortType">
    <wsdl:operation name="Dig">
      <wsdl:input message="tns:DigIn"/>
    </wsdl:operation>
  </wsdl:portType>
  <wsdl:binding name="DeepBinding" type="tns:DeepPortType">
    <soap:binding style="rpc" transport="http://schemas.xmlsoap.org/soap/http"/>
    <wsdl:operation name="Dig"/>
  </wsdl:binding>
  <wsdl:service name="DeepService">
    <wsdl:port name="DeepPort" binding="tns:DeepBinding">
      <soap:address location="http://example.com/deep"/>
    </wsdl:port>
  </wsdl:service>
</wsdl:definitions>
""".format(types)

@pytest.fixture
def deep_wsdl_path(tmp_path):
    path = tmp_path / 'deep_service.wsdl'
    path.write_text(deep_wsdl(sys.getrecursionlimit()), encoding='utf-8')
    return path
