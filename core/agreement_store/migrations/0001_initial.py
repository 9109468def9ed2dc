from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RentalAgreement",
            fields=[
                ("agreement_id", models.PositiveBigIntegerField(primary_key=True, serialize=False)),
                ("landlord", models.CharField(max_length=255)),
                ("tenant", models.CharField(max_length=255)),
                ("rent_amount", models.PositiveBigIntegerField()),
                ("security_deposit", models.PositiveBigIntegerField()),
                ("start_date", models.BigIntegerField(help_text="Epoch seconds.")),
                ("end_date", models.BigIntegerField(help_text="Epoch seconds.")),
                ("is_active", models.BooleanField(default=True)),
                ("deposit_paid", models.BooleanField(default=False)),
                (
                    "last_rent_payment",
                    models.BigIntegerField(
                        default=0,
                        help_text="Epoch seconds of the last accepted payment; 0 if never paid.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "escrow_rental_agreements",
                "ordering": ["agreement_id"],
                "indexes": [
                    models.Index(fields=["landlord", "agreement_id"], name="idx_agreement_landlord"),
                    models.Index(fields=["tenant", "agreement_id"], name="idx_agreement_tenant"),
                ],
            },
        ),
    ]
