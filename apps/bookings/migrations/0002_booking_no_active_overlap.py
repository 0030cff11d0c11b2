# PostgreSQL only: no two created/confirmed bookings of one listing may
# share a night. Other backends rely on the admission lock alone.

from django.db import migrations

CREATE_EXTENSION = "CREATE EXTENSION IF NOT EXISTS btree_gist"

CREATE_CONSTRAINT = """
ALTER TABLE bookings_booking
    ADD CONSTRAINT booking_no_active_overlap
    EXCLUDE USING gist (
        listing_id WITH =,
        daterange(check_in, check_out, '[)') WITH &&
    )
    WHERE (status IN ('created', 'confirmed'))
"""

DROP_CONSTRAINT = """
ALTER TABLE bookings_booking DROP CONSTRAINT IF EXISTS booking_no_active_overlap
"""


def add_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(CREATE_EXTENSION)
    schema_editor.execute(CREATE_CONSTRAINT)


def drop_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(DROP_CONSTRAINT)


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion_constraint, drop_exclusion_constraint),
    ]
