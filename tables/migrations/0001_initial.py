from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("table_number", models.CharField(max_length=10, unique=True)),
                ("table_name", models.CharField(max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[("AVAILABLE", "Available"), ("OCCUPIED", "Occupied")],
                        db_index=True,
                        default="AVAILABLE",
                        max_length=15,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["table_number"],
            },
        ),
    ]
