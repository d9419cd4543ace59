"""
Pytest configuration and fixtures for resmeasures tests.

Provides reusable test fixtures for:
- A single-zone box model
- Sample HPXML content
- Sample weather (EPW) content
- Mock simulation results
- Sample analysis YAML
"""

import pytest
from pathlib import Path
import tempfile
import shutil

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from resmeasures.core import constants
from resmeasures.envelope.geometry import (
    add_ceiling_polygon,
    add_floor_polygon,
    add_wall_polygon,
)
from resmeasures.model import Model, SubSurface, Surface
from resmeasures.waterheating.mains import set_mains_temperature


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs, cleaned up after test."""
    tmp = tempfile.mkdtemp(prefix="resmeasures_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


# =============================================================================
# MODEL FIXTURES
# =============================================================================

BOX_LENGTH_FT = 40.0
BOX_WIDTH_FT = 25.0
BOX_HEIGHT_FT = 8.0


@pytest.fixture
def empty_model() -> Model:
    """Model with no geometry."""
    return Model("Empty")


@pytest.fixture
def box_model() -> Model:
    """
    One-story 40 x 25 ft living space (1000 ft^2) with 8 ft walls, a flat
    roof, one 5 x 3 ft south window and one 3 x 6.67 ft north door.

    Mains temperatures are set for a cold climate.
    """
    model = Model("Box")
    living = model.create_or_get_space(constants.SPACE_TYPE_LIVING)

    model.add(Surface("Floor 1", "Floor", add_floor_polygon(BOX_LENGTH_FT, BOX_WIDTH_FT, 0.0),
                      space=living, outside_boundary_condition="Ground"))
    model.add(Surface("Roof 1", "RoofCeiling", add_ceiling_polygon(BOX_LENGTH_FT, BOX_WIDTH_FT, BOX_HEIGHT_FT),
                      space=living))

    walls = {}
    for azimuth in (0.0, 90.0, 180.0, 270.0):
        length = BOX_LENGTH_FT if azimuth in (0.0, 180.0) else BOX_WIDTH_FT
        name = f"Wall {int(azimuth)}"
        walls[azimuth] = model.add(Surface(name, "Wall", add_wall_polygon(length, BOX_HEIGHT_FT, 0.0, azimuth),
                                           space=living))

    walls[180.0].add_sub_surface(SubSurface("Window 1", "FixedWindow", add_wall_polygon(5.0, 3.0, 3.0, 180.0)))
    walls[0.0].add_sub_surface(SubSurface("Door 1", "Door", add_wall_polygon(3.0, 6.67, 0.0, 0.0)))

    model.properties["num_bedrooms"] = 3
    model.properties["num_bathrooms"] = 2
    set_mains_temperature(model, avg_oat=50.0, max_diff_monthly_avg_oat=40.0, latitude=40.0)
    return model


@pytest.fixture
def box_model_no_mains(box_model) -> Model:
    """Box model before the mains temperature has been set."""
    box_model.properties.pop("mains_temperatures")
    box_model.properties.pop("mains_inputs")
    return box_model


# =============================================================================
# HPXML FIXTURES
# =============================================================================

@pytest.fixture
def sample_hpxml_content() -> str:
    """Minimal namespaced HPXML document for parser tests."""
    return '''<?xml version="1.0" encoding="UTF-8"?>
<HPXML xmlns="http://hpxmlonline.com/2014/6" schemaVersion="3.0">
  <XMLTransactionHeaderInformation>
    <XMLType/>
    <XMLGeneratedBy>tests</XMLGeneratedBy>
    <CreatedDateAndTime>2026-01-01T00:00:00-07:00</CreatedDateAndTime>
    <Transaction>create</Transaction>
  </XMLTransactionHeaderInformation>
  <SoftwareInfo>
    <extension>
      <ERICalculation>
        <Version>2014AEG</Version>
      </ERICalculation>
    </extension>
  </SoftwareInfo>
  <Building>
    <BuildingID id="MyBuilding"/>
    <ProjectStatus><EventType>proposed workscope</EventType></ProjectStatus>
    <BuildingDetails>
      <BuildingSummary>
        <BuildingConstruction>
          <ResidentialFacilityType>single-family detached</ResidentialFacilityType>
          <NumberofConditionedFloors>2</NumberofConditionedFloors>
          <NumberofConditionedFloorsAboveGrade>1</NumberofConditionedFloorsAboveGrade>
          <NumberofBedrooms>3</NumberofBedrooms>
          <NumberofBathrooms>2</NumberofBathrooms>
          <ConditionedFloorArea>2700</ConditionedFloorArea>
          <ConditionedBuildingVolume>21600</ConditionedBuildingVolume>
        </BuildingConstruction>
      </BuildingSummary>
      <ClimateandRiskZones>
        <ClimateZoneIECC>
          <Year>2006</Year>
          <ClimateZone>5B</ClimateZone>
        </ClimateZoneIECC>
        <WeatherStation>
          <SystemIdentifier id="WeatherStation"/>
          <Name>Denver, CO</Name>
          <WMO>725650</WMO>
        </WeatherStation>
      </ClimateandRiskZones>
      <Enclosure>
        <AirInfiltration>
          <AirInfiltrationMeasurement>
            <SystemIdentifier id="InfiltrationMeasurement"/>
            <HousePressure>50</HousePressure>
            <BuildingAirLeakage>
              <UnitofMeasure>ACH</UnitofMeasure>
              <AirLeakage>3</AirLeakage>
            </BuildingAirLeakage>
          </AirInfiltrationMeasurement>
        </AirInfiltration>
        <Walls>
          <Wall>
            <SystemIdentifier id="Wall"/>
            <ExteriorAdjacentTo>outside</ExteriorAdjacentTo>
            <InteriorAdjacentTo>living space</InteriorAdjacentTo>
            <WallType><WoodStud/></WallType>
            <Area>1200</Area>
            <SolarAbsorptance>0.7</SolarAbsorptance>
            <Emittance>0.92</Emittance>
            <Insulation>
              <SystemIdentifier id="WallInsulation"/>
              <AssemblyEffectiveRValue>23</AssemblyEffectiveRValue>
            </Insulation>
          </Wall>
        </Walls>
        <Windows>
          <Window>
            <SystemIdentifier id="WindowNorth"/>
            <Area>108</Area>
            <Azimuth>0</Azimuth>
            <UFactor>0.33</UFactor>
            <SHGC>0.45</SHGC>
            <AttachedToWall idref="Wall"/>
          </Window>
        </Windows>
      </Enclosure>
      <Systems>
        <WaterHeating>
          <WaterHeatingSystem>
            <SystemIdentifier id="WaterHeater"/>
            <FuelType>natural gas</FuelType>
            <WaterHeaterType>storage water heater</WaterHeaterType>
            <Location>living space</Location>
            <TankVolume>40</TankVolume>
            <FractionDHWLoadServed>1</FractionDHWLoadServed>
            <HeatingCapacity>40000</HeatingCapacity>
            <EnergyFactor>0.59</EnergyFactor>
            <RecoveryEfficiency>0.76</RecoveryEfficiency>
          </WaterHeatingSystem>
        </WaterHeating>
      </Systems>
      <MiscLoads>
        <PlugLoad>
          <SystemIdentifier id="PlugLoadMisc"/>
          <PlugLoadType>other</PlugLoadType>
          <Load>
            <Units>kWh/year</Units>
            <Value>2457</Value>
          </Load>
        </PlugLoad>
      </MiscLoads>
    </BuildingDetails>
  </Building>
</HPXML>
'''


@pytest.fixture
def sample_hpxml_file(temp_dir, sample_hpxml_content) -> Path:
    """Write sample HPXML to a temp file and return its path."""
    path = temp_dir / "base.xml"
    path.write_text(sample_hpxml_content)
    return path


FULL_HOME_FOUNDATION_ATTIC = '''<Attics>
          <Attic>
            <SystemIdentifier id="VentedAttic"/>
            <AtticType><Attic><Vented>true</Vented></Attic></AtticType>
            <Roofs>
              <Roof>
                <SystemIdentifier id="Roof"/>
                <Area>1677</Area>
                <Azimuth>0</Azimuth>
                <SolarAbsorptance>0.7</SolarAbsorptance>
                <Emittance>0.92</Emittance>
                <Pitch>6</Pitch>
                <RadiantBarrier>false</RadiantBarrier>
                <Insulation>
                  <SystemIdentifier id="RoofInsulation"/>
                  <AssemblyEffectiveRValue>2.3</AssemblyEffectiveRValue>
                </Insulation>
              </Roof>
            </Roofs>
            <Floors>
              <Floor>
                <SystemIdentifier id="AtticFloor"/>
                <AdjacentTo>living space</AdjacentTo>
                <Area>1500</Area>
                <Insulation>
                  <SystemIdentifier id="AtticFloorInsulation"/>
                  <AssemblyEffectiveRValue>39.3</AssemblyEffectiveRValue>
                </Insulation>
              </Floor>
            </Floors>
          </Attic>
        </Attics>
        <Foundations>
          <Foundation>
            <SystemIdentifier id="SlabFoundation"/>
            <FoundationType><SlabOnGrade/></FoundationType>
            <Slab>
              <SystemIdentifier id="Slab"/>
              <Area>1500</Area>
              <Thickness>4</Thickness>
              <ExposedPerimeter>160</ExposedPerimeter>
              <PerimeterInsulationDepth>0</PerimeterInsulationDepth>
              <UnderSlabInsulationWidth>0</UnderSlabInsulationWidth>
              <DepthBelowGrade>0</DepthBelowGrade>
              <PerimeterInsulation>
                <SystemIdentifier id="PerimeterInsulation"/>
                <Layer>
                  <InstallationType>continuous</InstallationType>
                  <NominalRValue>0</NominalRValue>
                </Layer>
              </PerimeterInsulation>
              <UnderSlabInsulation>
                <SystemIdentifier id="UnderSlabInsulation"/>
                <Layer>
                  <InstallationType>continuous</InstallationType>
                  <NominalRValue>0</NominalRValue>
                </Layer>
              </UnderSlabInsulation>
              <extension>
                <CarpetFraction>0</CarpetFraction>
                <CarpetRValue>0</CarpetRValue>
              </extension>
            </Slab>
          </Foundation>
        </Foundations>
        <Walls>'''

FULL_HOME_DOORS = '''</Windows>
        <Doors>
          <Door>
            <SystemIdentifier id="DoorSouth"/>
            <AttachedToWall idref="Wall"/>
            <Area>40</Area>
            <Azimuth>180</Azimuth>
            <RValue>4.4</RValue>
          </Door>
        </Doors>'''

FULL_HOME_HVAC = '''<Systems>
        <HVAC>
          <HVACPlant>
            <HeatingSystem>
              <SystemIdentifier id="Furnace"/>
              <DistributionSystem idref="HVACDistribution"/>
              <HeatingSystemType><Furnace/></HeatingSystemType>
              <HeatingSystemFuel>natural gas</HeatingSystemFuel>
              <HeatingCapacity>-1</HeatingCapacity>
              <AnnualHeatingEfficiency>
                <Units>AFUE</Units>
                <Value>0.92</Value>
              </AnnualHeatingEfficiency>
              <FractionHeatLoadServed>1</FractionHeatLoadServed>
            </HeatingSystem>
            <CoolingSystem>
              <SystemIdentifier id="CentralAC"/>
              <DistributionSystem idref="HVACDistribution"/>
              <CoolingSystemType>central air conditioning</CoolingSystemType>
              <CoolingSystemFuel>electricity</CoolingSystemFuel>
              <CoolingCapacity>-1</CoolingCapacity>
              <FractionCoolLoadServed>1</FractionCoolLoadServed>
              <AnnualCoolingEfficiency>
                <Units>SEER</Units>
                <Value>13</Value>
              </AnnualCoolingEfficiency>
            </CoolingSystem>
          </HVACPlant>
          <HVACControl>
            <SystemIdentifier id="HVACControl"/>
            <ControlType>manual thermostat</ControlType>
            <SetpointTempHeatingSeason>68</SetpointTempHeatingSeason>
            <SetpointTempCoolingSeason>78</SetpointTempCoolingSeason>
          </HVACControl>
          <HVACDistribution>
            <SystemIdentifier id="HVACDistribution"/>
            <DistributionSystemType>
              <AirDistribution>
                <DuctLeakageMeasurement>
                  <DuctType>supply</DuctType>
                  <DuctLeakage>
                    <Units>CFM25</Units>
                    <Value>75</Value>
                    <TotalOrToOutside>to outside</TotalOrToOutside>
                  </DuctLeakage>
                </DuctLeakageMeasurement>
                <DuctLeakageMeasurement>
                  <DuctType>return</DuctType>
                  <DuctLeakage>
                    <Units>CFM25</Units>
                    <Value>25</Value>
                    <TotalOrToOutside>to outside</TotalOrToOutside>
                  </DuctLeakage>
                </DuctLeakageMeasurement>
                <Ducts>
                  <DuctType>supply</DuctType>
                  <DuctInsulationRValue>4</DuctInsulationRValue>
                  <DuctLocation>attic - vented</DuctLocation>
                  <DuctSurfaceArea>150</DuctSurfaceArea>
                </Ducts>
                <Ducts>
                  <DuctType>return</DuctType>
                  <DuctInsulationRValue>0</DuctInsulationRValue>
                  <DuctLocation>attic - vented</DuctLocation>
                  <DuctSurfaceArea>50</DuctSurfaceArea>
                </Ducts>
              </AirDistribution>
            </DistributionSystemType>
          </HVACDistribution>
        </HVAC>'''


@pytest.fixture
def full_home_hpxml_content(sample_hpxml_content) -> str:
    """
    One-story 50 x 30 ft slab-on-grade home (1500 ft^2) under a vented
    attic, with a window and a door in its wall, an autosized gas furnace
    and central air conditioner, and ducts in the attic.
    """
    content = sample_hpxml_content
    for old, new in [
        ("<NumberofConditionedFloors>2</NumberofConditionedFloors>",
         "<NumberofConditionedFloors>1</NumberofConditionedFloors>"),
        ("<ConditionedFloorArea>2700</ConditionedFloorArea>", "<ConditionedFloorArea>1500</ConditionedFloorArea>"),
        ("<ConditionedBuildingVolume>21600</ConditionedBuildingVolume>",
         "<ConditionedBuildingVolume>12000</ConditionedBuildingVolume>"),
        ("<Area>1200</Area>", "<Area>1280</Area>"),
        ("<Walls>", FULL_HOME_FOUNDATION_ATTIC),
        ("</Windows>", FULL_HOME_DOORS),
        ("<Systems>", FULL_HOME_HVAC),
    ]:
        assert old in content
        content = content.replace(old, new, 1)
    return content


@pytest.fixture
def full_home_hpxml_file(temp_dir, full_home_hpxml_content) -> Path:
    """Write the full home HPXML to a temp file and return its path."""
    path = temp_dir / "full_home.xml"
    path.write_text(full_home_hpxml_content)
    return path


# =============================================================================
# WEATHER FIXTURES
# =============================================================================

# Monthly dry-bulb (C) for a cold climate
MONTHLY_DRYBULB_C = [-2.0, 0.0, 4.0, 9.0, 14.0, 20.0, 24.0, 23.0, 18.0, 11.0, 4.0, -1.0]
MONTH_DAYS = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


@pytest.fixture
def sample_epw_content() -> str:
    """Full-year EPW with a constant dry-bulb within each month."""
    header = [
        "LOCATION,Denver Intl Ap,CO,USA,TMY3,725650,39.83,-104.65,-7.0,1650.0",
        "DESIGN CONDITIONS,0",
        "TYPICAL/EXTREME PERIODS,0",
        "GROUND TEMPERATURES,0",
        "HOLIDAYS/DAYLIGHT SAVINGS,No,0,0,0",
        "COMMENTS 1,test",
        "COMMENTS 2,test",
        "DATA PERIODS,1,1,Data,Sunday, 1/ 1,12/31",
    ]
    rows = []
    for month, (days, temp) in enumerate(zip(MONTH_DAYS, MONTHLY_DRYBULB_C), start=1):
        for day in range(1, days + 1):
            for hour in range(1, 25):
                values = [1999, month, day, hour, 0, "A7A7", temp, temp - 5.0, 50, 83000]
                values += [0] * 25
                rows.append(",".join(str(v) for v in values))
    return "\n".join(header + rows) + "\n"


@pytest.fixture
def weather_dir(temp_dir, sample_epw_content) -> Path:
    """Weather directory with data.csv and one EPW."""
    wdir = temp_dir / "weather"
    wdir.mkdir()
    (wdir / "USA_CO_Denver.725650_TMY3.epw").write_text(sample_epw_content)
    (wdir / "data.csv").write_text("wmo,station_name,filename\n725650,Denver,USA_CO_Denver.725650_TMY3.epw\n")
    return wdir


# =============================================================================
# SIMULATION RESULTS FIXTURES
# =============================================================================

@pytest.fixture
def sample_tabular_content() -> str:
    """Sample eplustbl.csv content for the end use parser."""
    return '''Program Version:,EnergyPlus, Version 9.1.0
,,
REPORT:,Annual Building Utility Performance Summary
,,
,Total Building Area,250.00
,,
End Uses
,,Electricity [GJ],Natural Gas [GJ],Additional Fuel [GJ],District Cooling [GJ],District Heating [GJ],Water [m3]
,Heating,3.60,36.00,0.00,0.00,0.00,0.00
,Cooling,7.20,0.00,0.00,0.00,0.00,0.00
,Interior Lighting,3.60,0.00,0.00,0.00,0.00,0.00
,Interior Equipment,10.80,0.00,0.00,0.00,0.00,0.00
,Fans,1.80,0.00,0.00,0.00,0.00,0.00
,Water Systems,0.00,18.00,0.00,0.00,0.00,0.00
,Generators,-7.20,0.00,0.00,0.00,0.00,0.00
,,
,Total End Uses,19.80,54.00,0.00,0.00,0.00,0.00
,,
End Uses By Subcategory
,,,Electricity [GJ],Natural Gas [GJ]
,Heating,General,3.60,36.00
'''


@pytest.fixture
def sample_tabular_dir(temp_dir, sample_tabular_content) -> Path:
    """Write sample tabular output to a run directory and return the directory."""
    (temp_dir / "eplustbl.csv").write_text(sample_tabular_content)
    return temp_dir


# =============================================================================
# ANALYSIS FIXTURES
# =============================================================================

@pytest.fixture
def sample_analysis_yml() -> str:
    """Analysis configuration with one upgrade and a downselect sampler."""
    return '''buildstock_directory: ../
project_directory: project_testing
output_directory: results
weather_files_path: weather.zip
sampler:
  type: residential_quota_downselect
  args:
    n_datapoints: 2
    logic:
      - Geometry Building Type RECS|Single-Family Detached
      - Vacancy Status|Occupied
    resample: false
workflow_generator:
  type: residential_default
  args:
    timeseries_csv_export:
      reporting_frequency: Hourly
    measures:
      - measure_dir_name: ResidentialMiscPlugLoads
        arguments:
          mult: 1.0
    reporting_measures:
      - measure_dir_name: QOIReport
upgrades:
  - upgrade_name: Heat Pump Water Heater
    options:
      - option: Water Heater|Electric Heat Pump, 50 gal
        lifetime: 12
        apply_logic:
          or:
            - Water Heater|Electric Standard
            - Water Heater|Gas Standard
        costs:
          - value: 1200
            multiplier: Fixed (1)
    package_apply_logic:
      not: Vacancy Status|Vacant
'''


@pytest.fixture
def analysis_yml_file(temp_dir, sample_analysis_yml) -> Path:
    """Write the sample analysis YAML into a project folder."""
    project = temp_dir / "project"
    project.mkdir()
    path = project / "project_testing.yml"
    path.write_text(sample_analysis_yml)
    return path
