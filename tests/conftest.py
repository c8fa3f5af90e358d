"""Shared fixtures."""

import pytest

ADAM_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<domain_objects>
  <gateway id="gw-node">
    <name>Adam</name>
    <hostname>smile000123</hostname>
    <vendor_model>159</vendor_model>
    <firmware_version>3.0.15</firmware_version>
    <hardware_version>AME Smile 2.0 board</hardware_version>
    <mac_address>012345670001</mac_address>
  </gateway>
  <appliance id="gw1">
    <name>Adam</name>
    <type>gateway</type>
    <vendor_model>159</vendor_model>
    <vendor_name>Plugwise</vendor_name>
    <firmware_version>3.0.15</firmware_version>
    <logs>
      <point_log id="l1">
        <type>outdoor_temperature</type>
        <period><measurement>7.44</measurement></period>
      </point_log>
    </logs>
  </appliance>
  <appliance id="heat1">
    <name>OpenTherm</name>
    <type>heater_central</type>
    <logs>
      <point_log id="l2">
        <type>water_temperature</type>
        <period><measurement>48.0</measurement></period>
      </point_log>
    </logs>
  </appliance>
  <appliance id="tstat1">
    <name>Lisa Living</name>
    <type>zone_thermostat</type>
    <vendor_model>158-01</vendor_model>
    <location id="loc1"/>
    <logs>
      <point_log id="l3">
        <type>temperature</type>
        <period><measurement unit="C">20.5</measurement></period>
      </point_log>
      <cumulative_log id="l4">
        <type>temperature</type>
        <period><measurement>1234.5</measurement></period>
      </cumulative_log>
      <point_log id="l5">
        <type>battery</type>
        <period><measurement>n/a</measurement></period>
      </point_log>
    </logs>
    <actuator_functionalities>
      <thermostat_functionality id="t1">
        <setpoint>21.0</setpoint>
        <lower_bound>4.0</lower_bound>
        <upper_bound>30.0</upper_bound>
        <resolution>0.1</resolution>
      </thermostat_functionality>
      <temperature_offset_functionality id="o1">
        <offset>-0.5</offset>
        <lower_bound>-2.0</lower_bound>
        <upper_bound>2.0</upper_bound>
      </temperature_offset_functionality>
    </actuator_functionalities>
  </appliance>
  <appliance id="plug1">
    <name>Circle Fridge</name>
    <type>refrigerator</type>
    <logs>
      <interval_log id="l6">
        <type>electricity_consumed</type>
        <period><measurement>12.0</measurement></period>
      </interval_log>
    </logs>
    <actuator_functionalities>
      <relay_functionality id="r1">
        <state>on</state>
        <lock>true</lock>
      </relay_functionality>
      <relay_functionality id="r2">
        <state>off</state>
      </relay_functionality>
    </actuator_functionalities>
  </appliance>
  <location id="loc1">
    <name>Living room</name>
    <type>room</type>
    <preset>home</preset>
    <logs>
      <point_log id="l7">
        <type>temperature</type>
        <period><measurement>20.5</measurement></period>
      </point_log>
      <point_log id="l8">
        <type>control_state</type>
        <period><measurement>heating</measurement></period>
      </point_log>
    </logs>
  </location>
  <location id="loc2">
    <name>Bedroom</name>
    <type>room</type>
  </location>
</domain_objects>
"""

NO_GATEWAY_DOCUMENT = """<domain_objects>
  <appliance id="a1"><name>Lone</name><type>thermostat</type></appliance>
</domain_objects>
"""


@pytest.fixture
def adam_document():
    return ADAM_DOCUMENT


@pytest.fixture
def no_gateway_document():
    return NO_GATEWAY_DOCUMENT
