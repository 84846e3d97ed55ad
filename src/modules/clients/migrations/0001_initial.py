import django.utils.timezone
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, editable=False
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("active", models.BooleanField(db_index=True, default=True)),
                (
                    "uuid",
                    models.UUIDField(default=uuid6.uuid7, editable=False, unique=True),
                ),
                ("first_name", models.CharField(max_length=100)),
                (
                    "second_name",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                ("first_surname", models.CharField(max_length=100)),
                (
                    "second_surname",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                ("email", models.EmailField(max_length=255)),
                ("address", models.CharField(max_length=500)),
                ("phone", models.CharField(max_length=20)),
                ("country_code", models.CharField(max_length=2)),
                ("demonym", models.CharField(blank=True, default="", max_length=100)),
            ],
            options={
                "db_table": "clients",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["-created_at"], name="clients_created_idx"),
                    models.Index(
                        fields=["country_code", "active"], name="clients_country_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("active", True)),
                        fields=("email",),
                        name="uk_client_email_active",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("active", True)),
                        fields=("phone",),
                        name="uk_client_phone_active",
                    ),
                ],
            },
        ),
    ]
